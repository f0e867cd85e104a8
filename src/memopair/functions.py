import numpy as np
import pandas as pd

DIFFERENTIAL = "differential"
MODERATELY_DIFFERENTIAL = "moderately differential"
NON_DIFFERENTIAL = "non-differential"

DIFFERENTIAL_THRESHOLD = 0.5
MODERATE_THRESHOLD = 0.1


def methylation_fraction(n_mod, n_valid_cov):
    """Fraction of valid calls that carry the modification."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.asarray(n_mod, dtype=np.float64) / np.asarray(n_valid_cov, dtype=np.float64)


def methylation_odds(mean_mod):
    """Odds of modification; NaN where the fraction is exactly 1."""
    mean_mod = np.asarray(mean_mod, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        odds = mean_mod / (1.0 - mean_mod)
    return np.where(mean_mod == 1.0, np.nan, odds)


def odds_ratio(odds_1, odds_2):
    """Ratio of two odds; NaN where either odds is exactly 0."""
    odds_1 = np.asarray(odds_1, dtype=np.float64)
    odds_2 = np.asarray(odds_2, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = odds_1 / odds_2
    return np.where((odds_1 == 0.0) | (odds_2 == 0.0), np.nan, ratio)


def classify_difference(methylation_difference):
    """Label absolute methylation differences with their differential class."""
    methylation_difference = np.asarray(methylation_difference, dtype=np.float64)
    return np.select(
        [methylation_difference > DIFFERENTIAL_THRESHOLD, methylation_difference > MODERATE_THRESHOLD],
        [DIFFERENTIAL, MODERATELY_DIFFERENTIAL],
        default=NON_DIFFERENTIAL,
    )


def differential_methylation(n_mod_1, n_valid_cov_1, n_mod_2, n_valid_cov_2) -> pd.DataFrame:
    """Compute per-pair differential methylation statistics.

    Parameters
    ----------
    n_mod_1, n_valid_cov_1 : array_like
        Modified and valid-coverage counts of the first record of each pair.
    n_mod_2, n_valid_cov_2 : array_like
        Counts of the partner record of each pair.

    Returns
    -------
    pd.DataFrame
        One row per pair with columns ``mean_mod_1``, ``mean_mod_2``,
        ``methylation_difference`` (absolute), ``odds_1``, ``odds_2``,
        ``odds_ratio`` and ``classification``.
    """
    mean_mod_1 = np.atleast_1d(methylation_fraction(n_mod_1, n_valid_cov_1))
    mean_mod_2 = np.atleast_1d(methylation_fraction(n_mod_2, n_valid_cov_2))
    difference = np.abs(mean_mod_1 - mean_mod_2)
    odds_1 = methylation_odds(mean_mod_1)
    odds_2 = methylation_odds(mean_mod_2)

    return pd.DataFrame(
        {
            "mean_mod_1": mean_mod_1,
            "mean_mod_2": mean_mod_2,
            "methylation_difference": difference,
            "odds_1": odds_1,
            "odds_2": odds_2,
            "odds_ratio": odds_ratio(odds_1, odds_2),
            "classification": classify_difference(difference),
        }
    )
