from __future__ import annotations

import logging
from collections import deque
from pathlib import Path
from typing import BinaryIO, Deque, Dict, Iterator, List, Optional, Sequence, Union

import pandas as pd

from memopair.models import ModType, PileupChunk, PileupRecord, Strand

# Zero-based columns of a modkit-style pileup line.
COL_REFERENCE = 0
COL_POSITION = 1
COL_MOD_TYPE = 3
COL_STRAND = 5
COL_N_VALID_COV = 9
COL_N_MOD = 11
COL_N_CANONICAL = 12
COL_N_DIFF = 17

RESULT_COLUMNS = [
    "contig",
    "start_position",
    "strand",
    "motif",
    "mod_position",
    "mod_type",
    "position",
    "n_mod",
    "n_nomod",
    "n_diff",
    "mod_position_2",
    "mod_type_2",
    "position_2",
    "n_mod_2",
    "n_nomod_2",
    "n_diff_2",
    "methylation_difference",
    "odds_ratio",
    "classification",
]


def read_fasta(path: str | Path) -> Dict[str, str]:
    """Read a FASTA file into a mapping of record name to upper-case sequence."""

    sequences: Dict[str, str] = {}

    with open(path, "r") as handle:
        name: Optional[str] = None
        current_seq: List[str] = []
        for line in handle:
            line = line.strip()
            if not line:
                continue
            if line.startswith(">"):
                if name is not None:
                    sequences[name] = "".join(current_seq).upper()
                header = line[1:].split()
                name = header[0] if header else ""
                current_seq = []
            else:
                current_seq.append(line)

        if name is not None:
            sequences[name] = "".join(current_seq).upper()

    return sequences


def parse_pileup_fields(fields: Sequence[bytes], min_cov: int) -> Optional[PileupRecord]:
    """Parse the split columns of one pileup line.

    Returns ``None`` for lines with missing columns, undecodable text,
    unparsable counters, unknown strand or modification symbols, or coverage
    below ``min_cov``.
    """
    try:
        n_valid_cov = int(fields[COL_N_VALID_COV])
        if n_valid_cov < min_cov:
            return None
        reference = fields[COL_REFERENCE].decode("utf-8")
        position = int(fields[COL_POSITION])
        strand = Strand.from_symbol(fields[COL_STRAND].decode("utf-8"))
        mod_type = ModType.parse(fields[COL_MOD_TYPE].decode("utf-8"))
        n_mod = int(fields[COL_N_MOD])
        n_canonical = int(fields[COL_N_CANONICAL])
        n_diff = int(fields[COL_N_DIFF])
    except (IndexError, ValueError):
        return None

    if min(position, n_mod, n_canonical, n_diff) < 0 or n_mod > n_valid_cov:
        return None

    return PileupRecord(
        reference=reference,
        position=position,
        strand=strand,
        mod_type=mod_type,
        n_mod=n_mod,
        n_valid_cov=n_valid_cov,
        n_canonical=n_canonical,
        n_diff=n_diff,
    )


class PileupChunkReader:
    """
    Streaming reader that groups consecutive pileup lines by reference.

    The input is expected to be sorted by reference. A reference that reappears
    after another one is emitted as a separate chunk. One line of lookahead is
    kept between calls: the first line of the next reference is pushed back and
    becomes the first line of the following chunk.
    """

    def __init__(self, handle: BinaryIO, min_cov: int = 5):
        self.logger = logging.getLogger(__name__)
        self._lines = iter(handle)
        self._buffer: Deque[List[bytes]] = deque()
        self.min_cov = min_cov
        self.eof_reached = False
        self.n_skipped = 0

    def __iter__(self) -> Iterator[PileupChunk]:
        while True:
            chunk = self.next_chunk()
            if chunk is None:
                return
            yield chunk

    def _next_fields(self) -> Optional[List[bytes]]:
        if self._buffer:
            return self._buffer.popleft()
        for line in self._lines:
            line = line.rstrip(b"\r\n")
            if line:
                return line.split(b"\t")
        self.eof_reached = True
        return None

    def next_chunk(self) -> Optional[PileupChunk]:
        """Read the next chunk of records sharing one reference.

        Groups whose lines all fail validation are skipped. Returns ``None``
        once the stream is exhausted.
        """
        while True:
            fields = self._next_fields()
            if fields is None:
                return None

            current_reference = fields[COL_REFERENCE]
            records: List[PileupRecord] = []
            skipped = 0
            while fields is not None:
                if fields[COL_REFERENCE] != current_reference:
                    self._buffer.appendleft(fields)
                    break
                record = parse_pileup_fields(fields, self.min_cov)
                if record is None:
                    skipped += 1
                else:
                    records.append(record)
                fields = self._next_fields()

            self.n_skipped += skipped
            if records:
                self.logger.debug(f"Chunk {records[0].reference}: {len(records)} record(s), {skipped} line(s) skipped")
                return PileupChunk(reference=records[0].reference, records=records)

            self.logger.debug(f"Skipped reference {current_reference!r}: no line passed validation")

    def load_n_chunks(self, n: int) -> List[PileupChunk]:
        """Pull up to ``n`` chunks; fewer are returned only when the stream ends."""
        chunks = []
        for _ in range(n):
            chunk = self.next_chunk()
            if chunk is None:
                break
            chunks.append(chunk)
        return chunks


class ResultWriter:
    """Write evaluation rows to one tab-separated file per contig."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)
        self._started: set[str] = set()

    def path_for(self, contig: str) -> Path:
        return self.output_dir / f"{contig}.tsv"

    def write(self, contig: str, rows: pd.DataFrame) -> Path:
        """Write rows for ``contig``; rows of a reappearing contig are appended."""
        path = self.path_for(contig)
        first = contig not in self._started
        table = rows.reindex(columns=RESULT_COLUMNS)
        table.to_csv(path, sep="\t", index=False, na_rep="NaN", mode="w" if first else "a", header=first)
        self._started.add(contig)
        return path
