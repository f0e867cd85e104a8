"""
Batch pipeline for motif pair methylation analysis.
This module streams a pileup file in batches of contig chunks, evaluates every
motif pair on each contig and writes one result table per contig.
"""

import logging
import time
from pathlib import Path
from typing import BinaryIO, Dict, List, Mapping, Sequence, Tuple, Union

import pandas as pd
from joblib import Parallel, delayed

from memopair.evaluation import MotifPairEvaluator
from memopair.io import PileupChunkReader, ResultWriter, read_fasta
from memopair.models import MotifPair, PileupChunk
from memopair.sequence import Contig, GenomeWorkspace, GenomeWorkspaceBuilder, MissingReferenceError


class Pipeline:
    """
    Batch-sequential pipeline over one pileup stream.

    Each batch is loaded, built into a genome workspace, evaluated and
    discarded before the next batch is read. Contigs of a batch are evaluated
    in parallel threads; their results are written from the calling thread.
    """

    def __init__(
        self,
        motif_pairs: Sequence[MotifPair],
        min_cov: int = 5,
        batch_size: int = 100,
        n_jobs: int = 5,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.logger = logging.getLogger(__name__)
        self.evaluator = MotifPairEvaluator(motif_pairs)
        self.min_cov = min_cov
        self.batch_size = batch_size
        self.n_jobs = n_jobs

    def load_reference(self, reference_path: Union[str, Path]) -> Dict[str, str]:
        """Load reference sequences from a FASTA file."""
        reference = read_fasta(reference_path)
        self.logger.info(f"Loaded {len(reference)} reference records")
        return reference

    def build_workspace(self, chunks: Sequence[PileupChunk], reference: Mapping[str, str]) -> GenomeWorkspace:
        """Assemble a read-only workspace from one batch of chunks."""
        builder = GenomeWorkspaceBuilder()
        for chunk in chunks:
            self.logger.info(f"Processing contig: {chunk.reference}")
            sequence = reference.get(chunk.reference)
            if sequence is None:
                raise MissingReferenceError(f"Reference sequence not found for contig: {chunk.reference}")
            builder.add_contig(chunk.reference, sequence)
            builder.push_records(chunk)
        return builder.build()

    def _evaluate_contig(self, contig: Contig) -> Tuple[str, pd.DataFrame]:
        return contig.reference, self.evaluator.evaluate(contig)

    def evaluate_workspace(self, workspace: GenomeWorkspace) -> List[Tuple[str, pd.DataFrame]]:
        """Evaluate all motif pairs on every contig of the workspace."""
        if self.n_jobs == 1 or len(workspace) <= 1:
            return [self._evaluate_contig(contig) for contig in workspace]
        return Parallel(n_jobs=self.n_jobs, prefer="threads")(
            delayed(self._evaluate_contig)(contig) for contig in workspace
        )

    def process_pileup(self, handle: BinaryIO, reference: Mapping[str, str], writer: ResultWriter) -> dict:
        """
        Run the batch loop over an open pileup stream.

        Args:
            handle: Binary stream of tab-delimited pileup lines
            reference: Mapping of contig name to sequence
            writer: Destination of the per-contig result tables

        Returns:
            Summary with the number of batches, contigs and rows
        """
        reader = PileupChunkReader(handle, min_cov=self.min_cov)
        n_batches = 0
        n_contigs = 0
        n_rows = 0

        while not reader.eof_reached:
            self.logger.info("Processing a batch")
            timer = time.perf_counter()
            chunks = reader.load_n_chunks(self.batch_size)
            if not chunks:
                self.logger.info("Batch did not contain any records")
                break
            self.logger.info(f"Loaded batch of {len(chunks)} chunk(s) in {time.perf_counter() - timer:.3f}s")

            workspace = self.build_workspace(chunks, reference)
            for contig_id, table in self.evaluate_workspace(workspace):
                path = writer.write(contig_id, table)
                self.logger.info(f"Wrote {len(table)} row(s) for {contig_id} to {path}")
                n_rows += len(table)

            n_batches += 1
            n_contigs += len(workspace)
            self.logger.info(f"Finished batch in {time.perf_counter() - timer:.3f}s")

        if reader.n_skipped:
            self.logger.info(f"Skipped {reader.n_skipped} pileup line(s) that failed validation")

        return {"batches": n_batches, "contigs": n_contigs, "rows": n_rows, "skipped_lines": reader.n_skipped}

    def run_pipeline(
        self,
        reference_path: Union[str, Path],
        pileup_path: Union[str, Path],
        output_dir: Union[str, Path],
    ) -> dict:
        """
        Main entry point for the pipeline.

        Args:
            reference_path: Path to the reference FASTA file
            pileup_path: Path to the tab-delimited pileup file
            output_dir: Directory receiving one TSV per contig

        Returns:
            Summary of the run
        """
        global_timer = time.perf_counter()
        reference = self.load_reference(reference_path)

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        self.logger.info(f"Writing results to {output_dir}")
        writer = ResultWriter(output_dir)

        self.logger.info(f"Processing pileup file: {pileup_path}")
        with open(pileup_path, "rb") as handle:
            summary = self.process_pileup(handle, reference, writer)

        summary["output_dir"] = str(output_dir)
        self.logger.info(f"Finished processing in {time.perf_counter() - global_timer:.3f}s")
        return summary


def run_pipeline(
    reference_path: Union[str, Path],
    pileup_path: Union[str, Path],
    motif_pairs: Sequence[MotifPair],
    output_dir: Union[str, Path] = "motif_methylation_state",
    min_cov: int = 5,
    batch_size: int = 100,
    n_jobs: int = 5,
) -> dict:
    """
    Module-level function to run the pipeline.

    Args:
        reference_path: Path to the reference FASTA file
        pileup_path: Path to the tab-delimited pileup file
        motif_pairs: Parsed motif pairs to evaluate
        output_dir: Directory receiving one TSV per contig
        min_cov: Minimum valid coverage of a pileup line
        batch_size: Number of contig chunks loaded per batch
        n_jobs: Number of threads evaluating contigs

    Returns:
        Summary of the run
    """
    pipeline = Pipeline(motif_pairs, min_cov=min_cov, batch_size=batch_size, n_jobs=n_jobs)
    return pipeline.run_pipeline(reference_path, pileup_path, output_dir)
