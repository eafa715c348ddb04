"""
Comparators

Map an applicant signal and a closing bound pair to a tier and an
admission probability. Two regimes:
- Rank (MPC, BiPC, CEC): lower is better
- Percentile (MEC, HEC): higher is better

Both pivot on the average of the bound pair and read their thresholds from
the calibration tables in constants.py.
"""

from typing import Optional, Tuple

from config import settings
from .constants import (
    Tier,
    ComparatorMode,
    RANK_CALIBRATION,
    PERCENTILE_CALIBRATION,
    FLOOR_PROBABILITY,
    RANK_REACH_MULTIPLIER,
    PERCENTILE_REACH_MULTIPLIER,
)


def _average(min_closing: float, max_closing: float) -> float:
    return (min_closing + max_closing) / 2


# =============================================================================
# RANK MODE
# =============================================================================

def categorize_by_rank(
    user_rank: float,
    min_closing_rank: float,
    max_closing_rank: float,
    include_reach: Optional[bool] = None,
) -> Optional[Tier]:
    """
    Categorize by rank comparison.

    Safe: rank within 80% of the average closing rank
    Moderate: within 120%
    Ambitious: within 150%
    None: too far from the closing ranks (dropped from results)
    """
    avg = _average(min_closing_rank, max_closing_rank)

    for multiplier, tier in RANK_CALIBRATION["tiers"]:
        if user_rank <= avg * multiplier:
            return tier

    if _reach_enabled(include_reach) and user_rank <= avg * RANK_REACH_MULTIPLIER:
        return Tier.AMBITIOUS

    return None


def rank_probability(
    user_rank: float,
    min_closing_rank: float,
    max_closing_rank: float,
) -> int:
    """Admission probability (%) from rank comparison."""
    avg = _average(min_closing_rank, max_closing_rank)

    for multiplier, probability in RANK_CALIBRATION["probability"]:
        if user_rank <= avg * multiplier:
            return probability

    return FLOOR_PROBABILITY


# =============================================================================
# PERCENTILE MODE
# =============================================================================

def percentile_probability(
    user_percentile: float,
    min_closing_percentile: float,
    max_closing_percentile: float,
) -> int:
    """Admission probability (%) from percentile comparison."""
    avg = _average(min_closing_percentile, max_closing_percentile)

    for multiplier, probability in PERCENTILE_CALIBRATION["probability"]:
        if user_percentile >= avg * multiplier:
            return probability

    return FLOOR_PROBABILITY


def categorize_by_percentile(
    user_percentile: float,
    min_closing_percentile: float,
    max_closing_percentile: float,
    include_reach: Optional[bool] = None,
) -> Tuple[Optional[Tier], int]:
    """
    Categorize by percentile comparison.

    Safe: percentile at least 110% of the average closing percentile
    Moderate: at least 90%
    Ambitious: at least 75%
    (None, 0): too far below the closing percentiles
    """
    avg = _average(min_closing_percentile, max_closing_percentile)

    for multiplier, tier in PERCENTILE_CALIBRATION["tiers"]:
        if user_percentile >= avg * multiplier:
            probability = percentile_probability(
                user_percentile, min_closing_percentile, max_closing_percentile
            )
            return tier, probability

    if _reach_enabled(include_reach) and user_percentile >= avg * PERCENTILE_REACH_MULTIPLIER:
        return Tier.AMBITIOUS, FLOOR_PROBABILITY

    return None, 0


# =============================================================================
# DISPATCH
# =============================================================================

def evaluate(
    mode: ComparatorMode,
    value: float,
    min_closing: float,
    max_closing: float,
    include_reach: Optional[bool] = None,
) -> Tuple[Optional[Tier], int]:
    """
    Evaluate a signal against a bound pair with the comparator for `mode`.

    Returns (tier, probability); tier is None when the institution should be
    dropped for this applicant.
    """
    mode = ComparatorMode(mode)

    if mode == ComparatorMode.RANK:
        tier = categorize_by_rank(value, min_closing, max_closing, include_reach)
        if tier is None:
            return None, 0
        return tier, rank_probability(value, min_closing, max_closing)

    if mode == ComparatorMode.PERCENTILE:
        return categorize_by_percentile(value, min_closing, max_closing, include_reach)

    raise ValueError(f"Unsupported comparator mode: {mode}")


def probability_for(
    mode: ComparatorMode,
    value: float,
    min_closing: float,
    max_closing: float,
) -> int:
    """Probability without tiering, used by the comparison view."""
    if ComparatorMode(mode) == ComparatorMode.RANK:
        return rank_probability(value, min_closing, max_closing)
    return percentile_probability(value, min_closing, max_closing)


def _reach_enabled(include_reach: Optional[bool]) -> bool:
    if include_reach is None:
        return settings.INCLUDE_REACH_TIER
    return include_reach
