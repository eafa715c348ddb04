"""
Predictor Constants

Defines tracks, comparator modes, calibration tables, fallback windows and
comparison thresholds used by the admission-probability engine.
All values are deterministic with no AI/ML components.
"""

from enum import Enum
from typing import Dict, List, Tuple


# =============================================================================
# TRACKS & COMPARATOR MODES
# =============================================================================

class Track(str, Enum):
    """Academic stream of the applicant."""
    MPC = "MPC"    # Maths, Physics, Chemistry
    BIPC = "BiPC"  # Biology, Physics, Chemistry
    MEC = "MEC"    # Maths, Economics, Commerce
    CEC = "CEC"    # Civics, Economics, Commerce
    HEC = "HEC"    # History, Economics, Civics


class ComparatorMode(str, Enum):
    """How an applicant signal is compared against closing cutoffs."""
    RANK = "rank"              # lower is better
    PERCENTILE = "percentile"  # higher is better


TRACK_MODE: Dict[Track, ComparatorMode] = {
    Track.MPC: ComparatorMode.RANK,
    Track.BIPC: ComparatorMode.RANK,
    Track.CEC: ComparatorMode.RANK,
    Track.MEC: ComparatorMode.PERCENTILE,
    Track.HEC: ComparatorMode.PERCENTILE,
}

if set(TRACK_MODE) != set(Track):
    raise RuntimeError("every track needs a comparator mode")


class Tier(str, Enum):
    """Admission outcome tiers."""
    SAFE = "Safe"
    MODERATE = "Moderate"
    AMBITIOUS = "Ambitious"


TIER_ORDER: List[Tier] = [Tier.SAFE, Tier.MODERATE, Tier.AMBITIOUS]


# =============================================================================
# CALIBRATION TABLES
# =============================================================================

# Multipliers of the average closing value. Rank: applicant must be at or
# below the boundary. Percentile: applicant must be at or above it.
RANK_CALIBRATION: Dict[str, List[Tuple[float, object]]] = {
    "tiers": [
        (0.8, Tier.SAFE),
        (1.2, Tier.MODERATE),
        (1.5, Tier.AMBITIOUS),
    ],
    "probability": [
        (0.5, 95),
        (0.8, 85),
        (1.0, 70),
        (1.2, 55),
        (1.5, 35),
    ],
}

PERCENTILE_CALIBRATION: Dict[str, List[Tuple[float, object]]] = {
    "tiers": [
        (1.1, Tier.SAFE),
        (0.9, Tier.MODERATE),
        (0.75, Tier.AMBITIOUS),
    ],
    "probability": [
        (1.2, 95),
        (1.1, 85),
        (1.0, 70),
        (0.9, 55),
        (0.75, 35),
    ],
}

# Probability when the signal lies beyond every calibrated boundary
FLOOR_PROBABILITY = 20

# Reach band, only used when settings.INCLUDE_REACH_TIER is on
RANK_REACH_MULTIPLIER = 2.0
PERCENTILE_REACH_MULTIPLIER = 0.6

MIN_PROBABILITY = 0
MAX_PROBABILITY = 100


# =============================================================================
# RANGE PARSING
# =============================================================================

# Substituted when cutoff text can't be parsed; predictions built on these
# windows are flagged with data_quality="fallback".
FALLBACK_RANK_WINDOW: Tuple[int, int] = (1000, 10000)
FALLBACK_PERCENTILE_WINDOW: Tuple[int, int] = (80, 90)

DATA_QUALITY_EXACT = "exact"
DATA_QUALITY_FALLBACK = "fallback"


# =============================================================================
# CATALOG LOOKUP
# =============================================================================

class MatchStage(str, Enum):
    """Catalog matching strategies, from strictest to most permissive."""
    EXACT = "exact"
    CASE_INSENSITIVE = "case_insensitive"
    PARTIAL = "partial"
    NONE = "none"


LOOKUP_CASCADE: List[MatchStage] = [
    MatchStage.EXACT,
    MatchStage.CASE_INSENSITIVE,
    MatchStage.PARTIAL,
]

# Catalogs at or above this size are evaluated on a thread pool
PARALLEL_EVALUATION_THRESHOLD = 50


# =============================================================================
# COMPARISON
# =============================================================================

MIN_COMPARE_INSTITUTIONS = 2
MAX_COMPARE_INSTITUTIONS = 5

DEFAULT_CATEGORY = "General"
STATE_QUOTA = "State"
ALL_INDIA_QUOTA = "All India"

RESERVED_CATEGORY_BOOST = 1.10
HOME_STATE_BOOST = 1.15
BOOSTED_PROBABILITY_CAP = 95

DEFAULT_PROGRAM_YEARS = 4

TOP_ACCREDITATION = "A++"
HIGH_PLACEMENT_RATE = 80
LOW_PLACEMENT_RATE = 60
AFFORDABLE_TUITION = 200000
HIGH_TUITION = 500000
GOVERNMENT_TYPE = "government"

MAX_PROS = 3
MAX_CONS = 3


# =============================================================================
# SCENARIOS
# =============================================================================

TOP_PER_TIER = 3


def coerce_track(value) -> Track:
    """Resolve a track code case-insensitively ("bipc" -> Track.BIPC)."""
    if isinstance(value, Track):
        return value
    text = str(value or "").strip()
    for track in Track:
        if track.value.lower() == text.lower():
            return track
    raise ValueError(f"Unknown track: {value!r}")
