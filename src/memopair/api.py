"""High-level public API for motif pair methylation analysis."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

from memopair.models import MotifPair, parse_motif_pair_string
from memopair.pipeline import run_pipeline

MotifPairRef = Union[MotifPair, str]
PathRef = Union[str, Path]


@dataclass
class PipelineConfig:
    """Unified configuration object for library usage."""

    reference: PathRef
    pileup: PathRef
    motif_pairs: List[MotifPair] = field(default_factory=list)
    output_dir: PathRef = "motif_methylation_state"
    min_cov: int = 5
    batch_size: int = 100
    threads: int = 5


def resolve_motif_pairs(motif_pairs: Sequence[MotifPairRef]) -> List[MotifPair]:
    """Parse motif pair strings, passing already built pairs through."""
    return [pair if isinstance(pair, MotifPair) else parse_motif_pair_string(pair) for pair in motif_pairs]


def create_config(
    reference: PathRef,
    pileup: PathRef,
    motif_pairs: Sequence[MotifPairRef],
    output_dir: PathRef = "motif_methylation_state",
    min_cov: int = 5,
    batch_size: int = 100,
    threads: int = 5,
) -> PipelineConfig:
    """Build a pipeline config; motif pair strings are parsed here and fail fast."""

    resolved = resolve_motif_pairs(motif_pairs)
    if not resolved:
        raise ValueError("No motifs provided")
    if min_cov < 0:
        raise ValueError(f"min_cov must be non-negative, got {min_cov}")

    return PipelineConfig(
        reference=reference,
        pileup=pileup,
        motif_pairs=resolved,
        output_dir=output_dir,
        min_cov=min_cov,
        batch_size=batch_size,
        threads=threads,
    )


def run(config: PipelineConfig) -> dict:
    """Execute the pipeline described by ``config``."""
    return run_pipeline(
        reference_path=config.reference,
        pileup_path=config.pileup,
        motif_pairs=config.motif_pairs,
        output_dir=config.output_dir,
        min_cov=config.min_cov,
        batch_size=config.batch_size,
        n_jobs=config.threads,
    )


def analyze_motif_pairs(
    reference: PathRef,
    pileup: PathRef,
    motif_pairs: Sequence[MotifPairRef],
    output_dir: PathRef = "motif_methylation_state",
    min_cov: int = 5,
    batch_size: int = 100,
    threads: int = 5,
) -> dict:
    """Single-call entry point for motif pair analysis."""

    config = create_config(
        reference=reference,
        pileup=pileup,
        motif_pairs=motif_pairs,
        output_dir=output_dir,
        min_cov=min_cov,
        batch_size=batch_size,
        threads=threads,
    )
    return run(config)
