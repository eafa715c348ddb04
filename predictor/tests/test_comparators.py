"""
Test the rank and percentile comparators.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from predictor.logic.comparators import (
    categorize_by_rank,
    rank_probability,
    categorize_by_percentile,
    percentile_probability,
    evaluate,
    probability_for,
)
from predictor.logic.constants import ComparatorMode, Tier, Track, TIER_ORDER, TRACK_MODE, FLOOR_PROBABILITY

# Dropped results sort after every tier
_DROPPED = len(TIER_ORDER)


def _tier_index(tier):
    return _DROPPED if tier is None else TIER_ORDER.index(Tier(tier))


def test_rank_moderate_at_average():
    # avg closing rank 500; 500 <= 1.2 * avg
    assert categorize_by_rank(500, 300, 700, include_reach=False) == Tier.MODERATE
    assert rank_probability(500, 300, 700) == 70


def test_rank_tiers():
    assert categorize_by_rank(200, 300, 700, include_reach=False) == Tier.SAFE
    assert rank_probability(200, 300, 700) == 95
    assert categorize_by_rank(700, 300, 700, include_reach=False) == Tier.AMBITIOUS
    assert rank_probability(700, 300, 700) == 35
    assert categorize_by_rank(800, 300, 700, include_reach=False) is None


def test_rank_reach_tier():
    assert categorize_by_rank(800, 300, 700, include_reach=True) == Tier.AMBITIOUS
    assert evaluate(ComparatorMode.RANK, 800, 300, 700, include_reach=True) == (
        Tier.AMBITIOUS,
        FLOOR_PROBABILITY,
    )
    # Beyond 2x average is dropped even with the reach band
    assert categorize_by_rank(1100, 300, 700, include_reach=True) is None


def test_percentile_moderate():
    # avg closing percentile 87.5
    tier, probability = categorize_by_percentile(92, 85, 90, include_reach=False)
    assert tier == Tier.MODERATE
    assert probability == 70


def test_percentile_tiers():
    assert categorize_by_percentile(99, 85, 90, include_reach=False) == (Tier.SAFE, 85)
    assert categorize_by_percentile(70, 85, 90, include_reach=False) == (Tier.AMBITIOUS, 35)
    assert categorize_by_percentile(60, 85, 90, include_reach=False) == (None, 0)


def test_percentile_reach_tier():
    assert categorize_by_percentile(60, 85, 90, include_reach=True) == (
        Tier.AMBITIOUS,
        FLOOR_PROBABILITY,
    )
    assert categorize_by_percentile(40, 85, 90, include_reach=True) == (None, 0)


def test_evaluate_drops_out_of_range():
    assert evaluate(ComparatorMode.RANK, 5000, 300, 700, include_reach=False) == (None, 0)
    assert evaluate(ComparatorMode.PERCENTILE, 10, 85, 90, include_reach=False) == (None, 0)


def test_rank_is_monotonic():
    """Better (lower) rank never gets a lower probability or a worse tier."""
    previous_probability = 101
    previous_tier = -1
    for rank in range(1, 1500, 7):
        probability = rank_probability(rank, 300, 700)
        tier = _tier_index(categorize_by_rank(rank, 300, 700, include_reach=False))
        assert probability <= previous_probability
        assert tier >= previous_tier
        previous_probability = probability
        previous_tier = tier


def test_percentile_is_monotonic():
    """Higher percentile never gets a lower probability or a worse tier."""
    previous_probability = -1
    previous_tier = _DROPPED + 1
    for step in range(0, 1001, 5):
        percentile = step / 10
        tier, probability = categorize_by_percentile(percentile, 85, 90, include_reach=False)
        probability = percentile_probability(percentile, 85, 90)
        assert probability >= previous_probability
        assert _tier_index(tier) <= previous_tier
        previous_probability = probability
        previous_tier = _tier_index(tier)


def test_probability_bounds():
    for value in [1, 50, 500, 5000, 50000]:
        assert 0 <= probability_for(ComparatorMode.RANK, value, 300, 700) <= 100
    for value in [0.5, 50, 87.5, 99.9, 100]:
        assert 0 <= probability_for(ComparatorMode.PERCENTILE, value, 85, 90) <= 100


def test_every_track_has_a_mode():
    assert set(TRACK_MODE) == set(Track)
