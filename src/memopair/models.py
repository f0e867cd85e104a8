"""
Motif and Pileup Models
=======================

Immutable data containers shared by the reader, the genome workspace and the
motif pair evaluator.

Key Features:
- Frozen dataclasses for motifs, motif pairs and pileup records
- Motif regex patterns compiled once per motif and reused across scans
- Reverse complementation as a pure function on motifs
- Parsers for ``SEQ_MODTYPE_POS`` and ``SEQ1_MODTYPE1_POS1_MODTYPE2_POS2`` strings
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Tuple, Union

from memopair.iupac import IupacBase, parse_sequence, reverse_complement

MOD_CODE_TO_PRETTY = {
    "a": "6mA",
    "m": "5mC",
    "21839": "4mC",
    "h": "5hmC",
}
MOD_PRETTY_TO_CODE = {v: k for k, v in MOD_CODE_TO_PRETTY.items()}


class MotifError(ValueError):
    """Raised for malformed motif strings or invalid motif definitions."""


class InvalidMotifPairError(MotifError):
    """Raised when a motif pair cannot be derived from its specification."""


class Strand(Enum):
    """Strand of a pileup call."""

    POSITIVE = "+"
    NEGATIVE = "-"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_symbol(cls, symbol: str) -> Strand:
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"Unrecognised strand symbol: {symbol!r}") from None


class ModType(Enum):
    """Base modification type, keyed by its pileup code."""

    SIX_MA = "a"
    FIVE_MC = "m"
    FOUR_MC = "21839"
    FIVE_HMC = "h"

    def __str__(self) -> str:
        return self.pretty

    @property
    def code(self) -> str:
        return self.value

    @property
    def pretty(self) -> str:
        return MOD_CODE_TO_PRETTY[self.value]

    @classmethod
    def parse(cls, text: str) -> ModType:
        """Parse either a pileup code (``a``) or a conventional name (``6mA``)."""
        code = MOD_PRETTY_TO_CODE.get(text, text)
        try:
            return cls(code)
        except ValueError:
            raise ValueError(f"Unrecognised modification type: {text!r}") from None


@dataclass(frozen=True)
class Motif:
    """Immutable degenerate motif with one modified position.

    Attributes
    ----------
    sequence : tuple of IupacBase
        Motif bases in 5' to 3' order.
    mod_type : ModType
        Modification carried by the base at ``position``.
    position : int
        Zero-based index of the modified base within ``sequence``.
    """

    sequence: Tuple[IupacBase, ...]
    mod_type: ModType
    position: int

    def __post_init__(self):
        if not self.sequence:
            raise MotifError("Motif sequence must not be empty")
        if not 0 <= self.position < len(self.sequence):
            raise MotifError(
                f"Modified position {self.position} out of range for motif {self.sequence_string} "
                f"of length {len(self.sequence)}"
            )

    def __len__(self) -> int:
        return len(self.sequence)

    def __str__(self) -> str:
        return f"{self.sequence_string}_{self.mod_type.pretty}_{self.position}"

    @property
    def sequence_string(self) -> str:
        return "".join(base.value for base in self.sequence)

    def regex(self) -> str:
        """Return the regex pattern matching the motif on a forward sequence."""
        return "".join(base.to_regex() for base in self.sequence)

    @functools.cached_property
    def pattern(self) -> re.Pattern:
        """Compiled :meth:`regex`, built on first use and kept with the motif."""
        return re.compile(self.regex())

    @functools.lru_cache(maxsize=None)
    def reverse_complement(self) -> Motif:
        """Return the motif as read on the opposite strand."""
        return Motif(
            sequence=reverse_complement(self.sequence),
            mod_type=self.mod_type,
            position=len(self.sequence) - 1 - self.position,
        )

    def is_palindromic(self) -> bool:
        return self.sequence == reverse_complement(self.sequence)


@dataclass(frozen=True)
class MotifPair:
    """A motif and its partner motif on the opposite strand.

    ``reverse`` is stored in the coordinates of the forward motif's reverse
    complement, so ``reverse.sequence`` always equals the reverse complement
    of ``forward.sequence``.

    Attributes
    ----------
    forward : Motif
        Motif read on the positive strand.
    reverse : Motif
        Partner motif read on the negative strand.
    palindromic : bool
        True when the forward sequence equals its own reverse complement.
    """

    forward: Motif
    reverse: Motif
    palindromic: bool = field(init=False)

    def __post_init__(self):
        if self.reverse.sequence != reverse_complement(self.forward.sequence):
            raise InvalidMotifPairError(
                f"Partner motif {self.reverse.sequence_string} is not the reverse complement "
                f"of {self.forward.sequence_string}"
            )
        object.__setattr__(self, "palindromic", self.forward.is_palindromic())

    def __str__(self) -> str:
        return (
            f"{self.forward.sequence_string}_{self.forward.mod_type.pretty}_{self.forward.position}"
            f"_{self.reverse.mod_type.pretty}_{self.partner_position}"
        )

    @property
    def partner_position(self) -> int:
        """Partner modified position as written in a motif pair string."""
        return len(self.reverse) - 1 - self.reverse.position

    @property
    def mod_position_shift(self) -> int:
        """Offset from the forward modified base to the partner modified base on the positive axis."""
        return self.reverse.reverse_complement().position - self.forward.position


@dataclass(frozen=True)
class PileupRecord:
    """One validated pileup line."""

    reference: str
    position: int
    strand: Strand
    mod_type: ModType
    n_mod: int
    n_valid_cov: int
    n_canonical: int
    n_diff: int

    @property
    def key(self) -> Tuple[int, Strand, ModType]:
        return (self.position, self.strand, self.mod_type)

    @property
    def n_nomod(self) -> int:
        return self.n_valid_cov - self.n_mod


@dataclass
class PileupChunk:
    """Consecutive pileup records of a single reference."""

    reference: str
    records: List[PileupRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)


def _parse_position(text: str, motif_string: str) -> int:
    """Parse a non-negative integer position field."""
    if not text.isdigit():
        raise MotifError(f"Invalid position {text!r} in motif string: {motif_string}")
    return int(text)


def _parse_mod_type(text: str, motif_string: str) -> ModType:
    try:
        return ModType.parse(text)
    except ValueError as e:
        raise MotifError(f"{e} in motif string: {motif_string}") from None


def create_motif(sequence: str, mod_type: Union[str, ModType], position: int) -> Motif:
    """Build a motif from an IUPAC string, a modification type and a position."""
    try:
        bases = parse_sequence(sequence.upper())
    except ValueError as e:
        raise MotifError(f"{e} in motif sequence: {sequence}") from None
    if not isinstance(mod_type, ModType):
        mod_type = _parse_mod_type(mod_type, sequence)
    return Motif(sequence=bases, mod_type=mod_type, position=position)


def create_motif_pair(forward: Motif, mod_type: Union[str, ModType], raw_position: int) -> MotifPair:
    """Derive the partner motif from the reverse complement of ``forward``.

    ``raw_position`` is re-expressed against the reverse complement of
    ``forward``, so the stored partner is the motif as read 5' to 3' on the
    opposite strand.
    """
    partner_sequence = forward.reverse_complement().sequence_string
    position = len(partner_sequence) - 1 - raw_position
    try:
        partner = create_motif(partner_sequence, mod_type, position)
        return MotifPair(forward=forward, reverse=partner)
    except InvalidMotifPairError:
        raise
    except MotifError as e:
        raise InvalidMotifPairError(f"Invalid partner motif for {forward}: {e}") from None


def parse_motif_string(motif_string: str) -> Motif:
    """Parse ``SEQ_MODTYPE_POS`` into a :class:`Motif`."""
    parts = motif_string.split("_")
    if len(parts) != 3:
        raise MotifError(f"Invalid motif string: {motif_string}")
    sequence, mod_type, position = parts
    return create_motif(sequence, mod_type, _parse_position(position, motif_string))


def parse_motif_pair_string(motif_pair_string: str) -> MotifPair:
    """Parse ``SEQ1_MODTYPE1_POS1_MODTYPE2_POS2`` into a :class:`MotifPair`."""
    parts = motif_pair_string.split("_")
    if len(parts) != 5:
        raise InvalidMotifPairError(f"Invalid motif pair string: {motif_pair_string}")
    sequence, mod_type_1, position_1, mod_type_2, position_2 = parts
    try:
        forward = create_motif(sequence, mod_type_1, _parse_position(position_1, motif_pair_string))
        return create_motif_pair(forward, mod_type_2, _parse_position(position_2, motif_pair_string))
    except InvalidMotifPairError:
        raise
    except MotifError as e:
        raise InvalidMotifPairError(str(e)) from None


def parse_motif_pair_strings(motif_pair_strings: Iterable[str]) -> List[MotifPair]:
    return [parse_motif_pair_string(s) for s in motif_pair_strings]
