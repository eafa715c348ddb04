"""
Request validation for the predictor engine.

Turns loosely-typed request values into ApplicantSignal objects and raises
PredictionValidationError with a message naming the offending field.
"""

from typing import Any, Dict, List, Optional

from .constants import ComparatorMode, Track, TRACK_MODE, DEFAULT_CATEGORY, coerce_track
from .contracts import ApplicantSignal, Scenario
from .errors import PredictionValidationError

VALID_TRACKS = ", ".join(t.value for t in Track)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def build_signal(
    track: Any,
    exam: Any,
    rank: Any = None,
    percentile: Any = None,
    category: Optional[str] = None,
    home_state: Optional[str] = None,
) -> ApplicantSignal:
    """
    Validate raw request values and build an ApplicantSignal.

    The value the track does not use (percentile for rank tracks, rank for
    percentile tracks) is ignored.
    """
    if _blank(track) or _blank(exam):
        field = "track" if _blank(track) else "exam"
        raise PredictionValidationError("Stream and exam are required", field=field)

    try:
        resolved = coerce_track(track)
    except ValueError:
        raise PredictionValidationError(
            f"Invalid stream. Must be one of: {VALID_TRACKS}", field="track"
        )

    mode = TRACK_MODE[resolved]
    signal_rank = None
    signal_percentile = None

    if mode == ComparatorMode.RANK:
        if _blank(rank):
            raise PredictionValidationError(
                f"Rank is required for {resolved.value} stream", field="rank"
            )
        if isinstance(rank, bool) or (isinstance(rank, float) and not rank.is_integer()):
            raise PredictionValidationError(f"Invalid rank: {rank!r}", field="rank")
        try:
            signal_rank = int(rank)
        except (TypeError, ValueError, OverflowError):
            raise PredictionValidationError(f"Invalid rank: {rank!r}", field="rank")
        if signal_rank <= 0:
            raise PredictionValidationError("Rank must be a positive integer", field="rank")
    else:
        if _blank(percentile):
            raise PredictionValidationError(
                f"Percentile is required for {resolved.value} stream", field="percentile"
            )
        try:
            signal_percentile = float(percentile)
        except (TypeError, ValueError):
            raise PredictionValidationError(
                f"Invalid percentile: {percentile!r}", field="percentile"
            )
        if not 0 < signal_percentile <= 100:
            raise PredictionValidationError(
                "Percentile must be between 0 and 100", field="percentile"
            )

    return ApplicantSignal(
        track=resolved,
        exam=str(exam).strip(),
        rank=signal_rank,
        percentile=signal_percentile,
        category=category or DEFAULT_CATEGORY,
        home_state=home_state,
    )


def build_scenarios(raw_scenarios: Any) -> List[Scenario]:
    """Validate a what-if payload: a list of {name, signal} objects."""
    if not isinstance(raw_scenarios, list) or not raw_scenarios:
        raise PredictionValidationError("Please provide scenarios array", field="scenarios")

    scenarios = []
    for index, raw in enumerate(raw_scenarios):
        if isinstance(raw, Scenario):
            scenarios.append(raw)
            continue
        if not isinstance(raw, dict):
            raise PredictionValidationError(
                f"Scenario {index + 1} must be an object", field="scenarios"
            )

        name = raw.get("name") or f"Scenario {index + 1}"
        signal_data: Dict[str, Any] = raw.get("signal") or {}
        if not isinstance(signal_data, dict):
            raise PredictionValidationError(f"{name}: signal must be an object", field="signal")
        try:
            signal = build_signal(
                signal_data.get("track"),
                signal_data.get("exam"),
                rank=signal_data.get("rank"),
                percentile=signal_data.get("percentile"),
                category=signal_data.get("category"),
                home_state=signal_data.get("home_state"),
            )
        except PredictionValidationError as e:
            raise PredictionValidationError(f"{name}: {e.message}", field=e.field)

        scenarios.append(Scenario(name=name, signal=signal))

    return scenarios
