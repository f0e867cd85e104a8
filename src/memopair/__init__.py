"""
MEMOPAIR
==================

This package compares methylation at the two modified positions of a
complementary motif pair, e.g. a 6mA call at one base of a recognition motif
against a 5mC call a few bases away on the opposite strand.  It is intended
for bacterial and archaeal epigenomes called from long-read sequencing
pileups.

The top level modules expose the following key components:

``iupac``
    The degenerate nucleotide alphabet, its regex classes and complements.

``models``
    Immutable motif, motif pair and pileup record containers together with
    the parsers for motif and motif pair strings.

``io``
    Reading reference sequences from FASTA, streaming pileup files in
    per-contig chunks and writing per-contig result tables.

``sequence``
    Contigs and the per-batch genome workspace, including motif scanning
    on both strands.

``functions``
    Differential methylation statistics and classification.

``evaluation``
    Pairing of calls across motif pairs and assembly of result rows.

``pipeline``
    The batch loop tying the reader, workspace and evaluator together.

``cli``
    The command line interface exposing the pipeline to end users.
"""

from memopair.api import PipelineConfig, analyze_motif_pairs, create_config, run
from memopair.models import (
    InvalidMotifPairError,
    ModType,
    Motif,
    MotifError,
    MotifPair,
    Strand,
    parse_motif_pair_string,
    parse_motif_string,
)

__version__ = "0.1.0"

__all__ = [
    "InvalidMotifPairError",
    "ModType",
    "Motif",
    "MotifError",
    "MotifPair",
    "PipelineConfig",
    "Strand",
    "analyze_motif_pairs",
    "create_config",
    "parse_motif_pair_string",
    "parse_motif_string",
    "run",
]
