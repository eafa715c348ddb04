"""
Range Parser

Turns heterogeneous cutoff strings ("150-1,000", "97–99") into numeric
(min, max) bounds. Parsing is pure; the fallback window substitution lives
in resolve_bounds so callers can see when it happened.
"""

import logging
import re
from typing import Optional, Tuple

from .constants import (
    ComparatorMode,
    FALLBACK_RANK_WINDOW,
    FALLBACK_PERCENTILE_WINDOW,
    DATA_QUALITY_EXACT,
    DATA_QUALITY_FALLBACK,
)

logger = logging.getLogger(__name__)

_NON_RANK_CHARS = re.compile(r"[^\d-]")
_PERCENTILE_RANGE = re.compile(r"(\d+)\s*[-–]\s*(\d+)")


def _ordered(low: int, high: int) -> Tuple[int, int]:
    return (low, high) if low <= high else (high, low)


def parse_rank_range(text: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Parse a closing rank range like "1-100" or "150-1,000".

    Every character other than digits and hyphens is dropped, then the
    string is split on the first hyphen. Returns None when either half
    is not an integer.
    """
    if not text:
        return None

    cleaned = _NON_RANK_CHARS.sub("", text)
    low, sep, high = cleaned.partition("-")
    if not sep or not low.isdigit() or not high.isdigit():
        return None

    return _ordered(int(low), int(high))


def parse_percentile_range(text: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse a percentile range like "85-90" or "97–99" (en-dash)."""
    if not text:
        return None

    match = _PERCENTILE_RANGE.search(text)
    if not match:
        return None

    return _ordered(int(match.group(1)), int(match.group(2)))


def resolve_bounds(
    text: Optional[str],
    mode: ComparatorMode,
) -> Tuple[int, int, str]:
    """
    Parse aggregate cutoff text for a comparator mode.

    Returns (min, max, data_quality). Malformed text yields the fixed
    fallback window for the mode with data_quality="fallback".
    """
    if mode == ComparatorMode.RANK:
        parsed = parse_rank_range(text)
        fallback = FALLBACK_RANK_WINDOW
    else:
        parsed = parse_percentile_range(text)
        fallback = FALLBACK_PERCENTILE_WINDOW

    if parsed is not None:
        return parsed[0], parsed[1], DATA_QUALITY_EXACT

    logger.warning(
        f"⚠️ Unparsable {mode.value} cutoff {text!r}; using fallback window {fallback}"
    )
    return fallback[0], fallback[1], DATA_QUALITY_FALLBACK
