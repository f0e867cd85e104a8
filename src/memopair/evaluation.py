"""
evaluation
==========

Pairing of methylation calls across the two motifs of a motif pair.  For
every occurrence of the forward motif the call at its modified base is
matched with the call at the partner's modified base on the opposite strand,
and each matched pair is summarised with differential methylation
statistics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
import pandas as pd

from memopair.functions import differential_methylation
from memopair.io import RESULT_COLUMNS
from memopair.models import MotifPair, PileupRecord, Strand
from memopair.sequence import Contig


@dataclass(frozen=True)
class PairedSite:
    """A motif occurrence with calls at both modified positions.

    Attributes
    ----------
    start_position : int
        Leftmost forward-sequence coordinate of the matched motif.
    strand : Strand
        Strand the forward motif was found on.
    record_1 : PileupRecord
        Call at the forward motif's modified base.
    record_2 : PileupRecord
        Call at the partner motif's modified base.
    """

    start_position: int
    strand: Strand
    record_1: PileupRecord
    record_2: PileupRecord


def _empty_result() -> pd.DataFrame:
    return pd.DataFrame(columns=RESULT_COLUMNS)


class MotifPairEvaluator:
    """
    Evaluate motif pairs against the contigs of a genome workspace.

    Lookups that find no record at a (position, strand, modification type)
    key skip only that site; a motif without occurrences yields no rows.
    """

    def __init__(self, motif_pairs: Sequence[MotifPair]) -> None:
        """
        Initialize the evaluator.

        Parameters
        ----------
        motif_pairs : sequence of MotifPair
            Motif pairs evaluated, in order, against every contig.
        """
        if not motif_pairs:
            raise ValueError("At least one motif pair is required")
        self.motif_pairs = list(motif_pairs)
        self.logger = logging.getLogger(__name__)

    def pair_sites(self, contig: Contig, pair: MotifPair) -> List[PairedSite]:
        """
        Find every motif occurrence on ``contig`` with calls at both modified bases.

        Forward-strand occurrences are paired with the partner call on the
        negative strand at ``index + shift``. For non-palindromic pairs the
        negative-strand occurrences are paired with the partner call on the
        positive strand at ``index - shift``. Palindromic pairs skip the second
        scan since its matches are the sites already visited.
        """
        forward = pair.forward
        partner = pair.reverse
        shift = pair.mod_position_shift
        sites = []

        fwd_indices = contig.find_motif_indices(forward) or []
        for index in fwd_indices:
            record_1 = contig.get_record(index, Strand.POSITIVE, forward.mod_type)
            if record_1 is None:
                continue
            record_2 = contig.get_record(index + shift, Strand.NEGATIVE, partner.mod_type)
            if record_2 is None:
                continue
            sites.append(PairedSite(index - forward.position, Strand.POSITIVE, record_1, record_2))

        self.logger.debug(f"{contig.reference} {pair}: {len(fwd_indices)} forward match(es), {len(sites)} paired")

        if pair.palindromic:
            self.logger.debug(f"{pair} is palindromic, skipping the complement scan")
            return sites

        complement = forward.reverse_complement()
        rev_indices = contig.find_complement_motif_indices(forward) or []
        n_forward_sites = len(sites)
        for index in rev_indices:
            record_1 = contig.get_record(index, Strand.NEGATIVE, forward.mod_type)
            if record_1 is None:
                continue
            record_2 = contig.get_record(index - shift, Strand.POSITIVE, partner.mod_type)
            if record_2 is None:
                continue
            sites.append(PairedSite(index - complement.position, Strand.NEGATIVE, record_1, record_2))

        self.logger.debug(
            f"{contig.reference} {pair}: {len(rev_indices)} complement match(es), {len(sites) - n_forward_sites} paired"
        )
        return sites

    def evaluate_pair(self, contig: Contig, pair: MotifPair) -> pd.DataFrame:
        """
        Build the result rows of one motif pair on one contig.

        Returns
        -------
        pd.DataFrame
            One row per paired site with the columns of ``RESULT_COLUMNS``.
        """
        sites = self.pair_sites(contig, pair)
        if not sites:
            return _empty_result()

        first = [site.record_1 for site in sites]
        second = [site.record_2 for site in sites]
        n_mod_1 = np.array([r.n_mod for r in first], dtype=np.int64)
        n_cov_1 = np.array([r.n_valid_cov for r in first], dtype=np.int64)
        n_mod_2 = np.array([r.n_mod for r in second], dtype=np.int64)
        n_cov_2 = np.array([r.n_valid_cov for r in second], dtype=np.int64)

        stats = differential_methylation(n_mod_1, n_cov_1, n_mod_2, n_cov_2)

        table = pd.DataFrame(
            {
                "contig": contig.reference,
                "start_position": [site.start_position for site in sites],
                "strand": [str(site.strand) for site in sites],
                "motif": pair.forward.sequence_string,
                "mod_position": pair.forward.position,
                "mod_type": pair.forward.mod_type.pretty,
                "position": [r.position for r in first],
                "n_mod": n_mod_1,
                "n_nomod": n_cov_1 - n_mod_1,
                "n_diff": [r.n_diff for r in first],
                "mod_position_2": pair.reverse.position,
                "mod_type_2": pair.reverse.mod_type.pretty,
                "position_2": [r.position for r in second],
                "n_mod_2": n_mod_2,
                "n_nomod_2": n_cov_2 - n_mod_2,
                "n_diff_2": [r.n_diff for r in second],
                "methylation_difference": stats["methylation_difference"].to_numpy(),
                "odds_ratio": stats["odds_ratio"].to_numpy(),
                "classification": stats["classification"].to_numpy(),
            }
        )
        return table[RESULT_COLUMNS]

    def evaluate(self, contig: Contig) -> pd.DataFrame:
        """Evaluate every configured motif pair on ``contig``."""
        tables = []
        for pair in self.motif_pairs:
            self.logger.debug(f"Processing motif pair {pair} on {contig.reference}")
            table = self.evaluate_pair(contig, pair)
            if len(table) > 0:
                tables.append(table)

        if not tables:
            return _empty_result()
        return pd.concat(tables, ignore_index=True)
