"""
Pytest configuration and common fixtures for memopair tests.
"""
import sys
import tempfile
from pathlib import Path

import pytest

# Test the installed package, not the checkout root
project_root = str(Path(__file__).parent.parent.absolute())
if project_root in sys.path:
    sys.path.remove(project_root)


def pileup_line(reference, position, strand, mod_type, n_valid_cov, n_mod, n_diff=0):
    """Build one 18-column pileup line in modkit column order."""
    n_canonical = n_valid_cov - n_mod
    fraction = 100.0 * n_mod / n_valid_cov if n_valid_cov else 0.0
    fields = [
        reference,
        str(position),
        str(position + 1),
        mod_type,
        str(n_valid_cov),
        strand,
        str(position),
        str(position + 1),
        "255,0,0",
        str(n_valid_cov),
        f"{fraction:.2f}",
        str(n_mod),
        str(n_canonical),
        "0",
        "0",
        "0",
        "0",
        str(n_diff),
    ]
    return "\t".join(fields)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_pileup_line():
    """Factory for pileup lines."""
    return pileup_line


@pytest.fixture
def genome_files(temp_dir):
    """Reference FASTA and sorted pileup covering two contigs.

    ``contig_1`` carries one GAAGAC site per strand, ``contig_2`` two GATC sites.
    """
    fasta_path = temp_dir / "reference.fasta"
    fasta_path.write_text(
        ">contig_1 non-palindromic test contig\n"
        "TTGAAGACTT\n"
        "TTGTCTTCAA\n"
        ">contig_2\n"
        "aagatcaagatcaa\n"
    )

    lines = [
        pileup_line("contig_1", 6, "+", "a", 10, 8, n_diff=1),
        pileup_line("contig_1", 7, "-", "m", 10, 2),
        pileup_line("contig_1", 12, "+", "m", 10, 9),
        pileup_line("contig_1", 13, "-", "a", 10, 9),
        pileup_line("contig_1", 15, "+", "a", 2, 1),
        pileup_line("contig_2", 3, "+", "a", 20, 20),
        pileup_line("contig_2", 4, "-", "a", 20, 10),
        pileup_line("contig_2", 9, "+", "a", 20, 4),
        pileup_line("contig_2", 10, "-", "a", 20, 4),
    ]
    pileup_path = temp_dir / "pileup.bed"
    pileup_path.write_text("\n".join(lines) + "\n")

    return fasta_path, pileup_path
