"""IUPAC nucleotide alphabet with regex translation and complementation."""

from __future__ import annotations

from enum import Enum

IUPAC_TO_BASES = {
    "A": "A",
    "C": "C",
    "G": "G",
    "T": "T",
    "R": "AG",
    "Y": "CT",
    "S": "CG",
    "W": "AT",
    "K": "GT",
    "M": "AC",
    "B": "CGT",
    "D": "AGT",
    "H": "ACT",
    "V": "ACG",
    "N": "ACGT",
}

COMPLEMENT = {
    "A": "T",
    "C": "G",
    "G": "C",
    "T": "A",
    "R": "Y",
    "Y": "R",
    "S": "S",
    "W": "W",
    "K": "M",
    "M": "K",
    "B": "V",
    "D": "H",
    "H": "D",
    "V": "B",
    "N": "N",
}


class IupacBase(Enum):
    """A single, possibly degenerate, nucleotide symbol."""

    A = "A"
    C = "C"
    G = "G"
    T = "T"
    R = "R"
    Y = "Y"
    S = "S"
    W = "W"
    K = "K"
    M = "M"
    B = "B"
    D = "D"
    H = "H"
    V = "V"
    N = "N"

    def __str__(self) -> str:
        return self.value

    def to_regex(self) -> str:
        """Return the literal base or the bracketed character class of the symbol."""
        bases = IUPAC_TO_BASES[self.value]
        if len(bases) == 1:
            return bases
        return f"[{bases}]"

    def complement(self) -> IupacBase:
        """Return the Watson-Crick complement, extended over degenerate codes."""
        return IupacBase(COMPLEMENT[self.value])

    @classmethod
    def from_char(cls, char: str) -> IupacBase:
        """Parse a single character, raising ``ValueError`` for anything outside the alphabet."""
        try:
            return cls(char)
        except ValueError:
            raise ValueError(f"Invalid IUPAC base: {char!r}") from None


def parse_sequence(sequence: str) -> tuple[IupacBase, ...]:
    """Parse an IUPAC string into a tuple of bases."""
    return tuple(IupacBase.from_char(char) for char in sequence)


def reverse_complement(bases: tuple[IupacBase, ...]) -> tuple[IupacBase, ...]:
    """Reverse the base order and complement each base."""
    return tuple(base.complement() for base in reversed(bases))
