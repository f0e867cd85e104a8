"""
Contigs and the per-batch genome workspace.

A :class:`GenomeWorkspaceBuilder` accumulates reference sequences and pileup
chunks for one batch; :meth:`GenomeWorkspaceBuilder.build` freezes every
contig and hands out a read-only :class:`GenomeWorkspace`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from memopair.models import ModType, Motif, PileupChunk, PileupRecord, Strand

RecordKey = Tuple[int, Strand, ModType]


class MissingReferenceError(LookupError):
    """Raised when pileup records name a contig with no reference sequence."""


class ReferenceMismatchError(ValueError):
    """Raised when records of one reference are merged into another contig."""


class Contig:
    """A reference sequence with its pileup records indexed by (position, strand, mod type)."""

    def __init__(self, reference: str, sequence: str):
        self.reference = reference
        self.sequence = sequence
        self.records: Mapping[RecordKey, PileupRecord] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self.sequence)

    def __repr__(self) -> str:
        return f"Contig(reference={self.reference!r}, length={len(self)}, records={len(self.records)})"

    def add_record(self, record: PileupRecord) -> None:
        if self._frozen:
            raise RuntimeError(f"Contig {self.reference} is read-only")
        if record.reference != self.reference:
            raise ReferenceMismatchError(f"Reference mismatch: {record.reference} != {self.reference}")
        self.records[record.key] = record

    def add_records(self, chunk: PileupChunk) -> None:
        if chunk.reference != self.reference:
            raise ReferenceMismatchError(f"Reference mismatch: {chunk.reference} != {self.reference}")
        for record in chunk.records:
            self.add_record(record)

    def freeze(self) -> None:
        self.records = MappingProxyType(dict(self.records))
        self._frozen = True

    def get_record(self, position: int, strand: Strand, mod_type: ModType) -> Optional[PileupRecord]:
        """Return the record at the key, or ``None`` when nothing was called there."""
        return self.records.get((position, strand, mod_type))

    def _scan(self, motif: Motif) -> Optional[List[int]]:
        indices = [match.start() + motif.position for match in motif.pattern.finditer(self.sequence)]
        return indices or None

    def find_motif_indices(self, motif: Motif) -> Optional[List[int]]:
        """Positions of the modified base for every non-overlapping forward-strand match."""
        return self._scan(motif)

    def find_complement_motif_indices(self, motif: Motif) -> Optional[List[int]]:
        """Positions of the modified base for every non-overlapping match on the negative strand.

        The reverse complement of ``motif`` is matched against the forward
        sequence, so the returned indices are already forward coordinates.
        """
        return self._scan(motif.reverse_complement())


class GenomeWorkspace:
    """Read-only collection of the contigs of one batch."""

    def __init__(self, contigs: Dict[str, Contig]):
        self.contigs: Mapping[str, Contig] = MappingProxyType(contigs)

    def __len__(self) -> int:
        return len(self.contigs)

    def __iter__(self):
        return iter(self.contigs.values())

    def __getitem__(self, reference: str) -> Contig:
        return self.contigs[reference]


class GenomeWorkspaceBuilder:
    """Mutable accumulation stage for a :class:`GenomeWorkspace`."""

    def __init__(self):
        self.contigs: Dict[str, Contig] = {}

    def add_contig(self, reference: str, sequence: str) -> None:
        """Register a reference sequence; an already registered contig keeps its records."""
        if reference not in self.contigs:
            self.contigs[reference] = Contig(reference, sequence)

    def push_records(self, chunk: PileupChunk) -> None:
        contig = self.contigs.get(chunk.reference)
        if contig is None:
            raise MissingReferenceError(f"Could not find contig: {chunk.reference}")
        contig.add_records(chunk)

    def build(self) -> GenomeWorkspace:
        for contig in self.contigs.values():
            contig.freeze()
        workspace = GenomeWorkspace(self.contigs)
        self.contigs = {}
        return workspace
