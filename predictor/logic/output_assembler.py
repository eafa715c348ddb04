"""
Output Assembler

Transforms sorted predictions into the PredictionOutput contract:
tier partitions, counts and a human-readable explanation.
"""

import logging
from typing import Dict, List, Optional

from .constants import Tier, TIER_ORDER, ComparatorMode, MatchStage, DATA_QUALITY_FALLBACK
from .contracts import (
    ApplicantSignal,
    Prediction,
    PredictionOutput,
    PredictionStats,
    PredictionSummary,
)

logger = logging.getLogger(__name__)


def partition_by_tier(predictions: List[Prediction]) -> Dict[Tier, List[Prediction]]:
    """Group predictions by tier, keeping their order."""
    by_tier: Dict[Tier, List[Prediction]] = {tier: [] for tier in TIER_ORDER}
    for prediction in predictions:
        by_tier[Tier(prediction.tier)].append(prediction)
    return by_tier


def count_institutions(predictions: List[Prediction]) -> int:
    """Distinct institutions; one institution may contribute several programs."""
    return len({p.institution_key for p in predictions})


def assemble_output(
    signal: ApplicantSignal,
    predictions: List[Prediction],
    match_stage: MatchStage = MatchStage.NONE,
    institutions_matched: int = 0,
    available_exams: Optional[List[str]] = None,
    stats: Optional[PredictionStats] = None,
    source: str = "catalog",
    warnings: Optional[List[str]] = None,
) -> PredictionOutput:
    """
    Assemble the final PredictionOutput.

    Args:
        signal: Applicant signal the predictions were built for
        predictions: Predictions sorted by probability
        match_stage: Lookup stage that produced the candidates
        institutions_matched: Colleges returned by the lookup
        available_exams: Exams on offer for the track (shown on zero matches)
        stats: Counters for the run
        source: "catalog" or "ai"
        warnings: Warnings collected upstream

    Returns:
        Complete PredictionOutput
    """
    by_tier = partition_by_tier(predictions)
    unique_institutions = count_institutions(predictions)
    fallback_count = sum(1 for p in predictions if p.data_quality == DATA_QUALITY_FALLBACK)

    warnings = list(warnings or [])
    if fallback_count:
        warnings.append(
            f"{fallback_count} prediction(s) use an estimated cutoff window because "
            f"the published cutoff could not be read."
        )
    if match_stage == MatchStage.PARTIAL:
        warnings.append(f"No exact catalog match for exam '{signal.exam}'; showing partial matches.")

    summary = PredictionSummary(
        total_predictions=len(predictions),
        unique_institutions=unique_institutions,
        safe_count=len(by_tier[Tier.SAFE]),
        moderate_count=len(by_tier[Tier.MODERATE]),
        ambitious_count=len(by_tier[Tier.AMBITIOUS]),
        track=signal.track,
        exam=signal.exam,
        rank=signal.rank,
        percentile=signal.percentile,
        input_type=signal.mode.value,
        match_stage=match_stage.value,
        fallback_predictions=fallback_count,
        available_exams=available_exams or [],
        explanation=_explain(signal, predictions, unique_institutions, institutions_matched, available_exams),
    )

    logger.info(
        f"📤 Safe={summary.safe_count} Moderate={summary.moderate_count} "
        f"Ambitious={summary.ambitious_count} Colleges={unique_institutions}"
    )

    return PredictionOutput(
        safe=by_tier[Tier.SAFE],
        moderate=by_tier[Tier.MODERATE],
        ambitious=by_tier[Tier.AMBITIOUS],
        summary=summary,
        source=source,
        warnings=warnings,
        stats=stats,
    )


def _explain(
    signal: ApplicantSignal,
    predictions: List[Prediction],
    unique_institutions: int,
    institutions_matched: int,
    available_exams: Optional[List[str]],
) -> str:
    if institutions_matched == 0 and not predictions:
        explanation = (
            f"No colleges in the catalog accept '{signal.exam}' for the {signal.track} stream."
        )
        if available_exams:
            explanation += f" Available exams for {signal.track}: {', '.join(available_exams)}."
        return explanation

    if not predictions:
        label = "rank" if signal.mode == ComparatorMode.RANK else "percentile"
        return (
            f"Matched {institutions_matched} colleges, but none are within reach "
            f"for your {label} of {signal.value:g}."
        )

    return f"Found {unique_institutions} colleges with {len(predictions)} branch options"
