"""
Prediction Aggregator

Drives catalog lookup and the track's comparator over every matched
institution and program, and returns the predictions sorted by
probability (highest first).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from config import settings
from .catalog import CatalogReader
from .comparators import evaluate
from .constants import (
    ComparatorMode,
    DATA_QUALITY_EXACT,
    DATA_QUALITY_FALLBACK,
    PARALLEL_EVALUATION_THRESHOLD,
)
from .contracts import ApplicantSignal, Institution, Prediction, PredictionStats
from .lookup import CatalogLookupResolver, LookupResult
from .range_parser import resolve_bounds

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    predictions: List[Prediction] = field(default_factory=list)
    lookup: LookupResult = field(default_factory=LookupResult)


def _fmt(value: float) -> str:
    return f"{value:g}"


def _reason(mode: ComparatorMode, value: float, min_closing: float, max_closing: float, data_quality: str) -> str:
    label = "rank" if mode == ComparatorMode.RANK else "percentile"
    reason = f"Your {label} {_fmt(value)} vs closing {label} {_fmt(min_closing)}-{_fmt(max_closing)}"
    if data_quality == DATA_QUALITY_FALLBACK:
        reason += " (estimated: published cutoff could not be read)"
    return reason


def _predict(
    institution: Institution,
    signal: ApplicantSignal,
    min_closing: float,
    max_closing: float,
    program: Optional[str],
    data_quality: str,
    include_reach: Optional[bool],
) -> Optional[Prediction]:
    mode = signal.mode
    tier, probability = evaluate(mode, signal.value, min_closing, max_closing, include_reach)
    if tier is None:
        return None

    return Prediction(
        institution_id=institution.id,
        institution_name=institution.name,
        city=institution.city,
        state=institution.state,
        program=program,
        tier=tier,
        probability=probability,
        reason=_reason(mode, signal.value, min_closing, max_closing, data_quality),
        data_quality=data_quality,
        closing_min=min_closing,
        closing_max=max_closing,
    )


def evaluate_institution(
    institution: Institution,
    signal: ApplicantSignal,
    include_reach: Optional[bool] = None,
) -> Tuple[List[Prediction], PredictionStats]:
    """
    Evaluate one institution for an applicant.

    Institutions with programs yield one prediction per program in range;
    otherwise the aggregate cutoff text yields at most one prediction.
    Returns the predictions and the counters for this institution.
    """
    stats = PredictionStats()
    predictions: List[Prediction] = []

    if institution.programs:
        for program in institution.programs:
            stats.programs_evaluated += 1
            prediction = _predict(
                institution,
                signal,
                program.closing_min,
                program.closing_max,
                program.name,
                DATA_QUALITY_EXACT,
                include_reach,
            )
            if prediction is None:
                stats.dropped_out_of_range += 1
                continue
            predictions.append(prediction)
    else:
        text = institution.aggregate_cutoff_text()
        if not text or not text.strip():
            stats.missing_cutoff += 1
            logger.debug(f"No {signal.mode.value} cutoff for {institution.name}; skipping")
            return predictions, stats

        min_closing, max_closing, data_quality = resolve_bounds(text, signal.mode)
        if data_quality == DATA_QUALITY_FALLBACK:
            stats.parse_fallbacks += 1

        prediction = _predict(
            institution, signal, min_closing, max_closing, None, data_quality, include_reach
        )
        if prediction is None:
            stats.dropped_out_of_range += 1
        else:
            predictions.append(prediction)

    stats.predictions_emitted = len(predictions)
    return predictions, stats


class PredictionAggregator:
    """
    Builds tiered predictions for every institution matching a signal.

    Pipeline flow:
    1. Catalog lookup with fallback cascade
    2. Per-institution evaluation (thread pool for large catalogs)
    3. Stable sort by probability, highest first
    """

    def __init__(
        self,
        catalog: CatalogReader,
        max_workers: Optional[int] = None,
        include_reach: Optional[bool] = None,
    ):
        self.resolver = CatalogLookupResolver(catalog)
        self.max_workers = max_workers or settings.MAX_WORKERS
        self.include_reach = include_reach

    def aggregate(
        self,
        signal: ApplicantSignal,
        stats: Optional[PredictionStats] = None,
    ) -> AggregationResult:
        """
        Generate sorted predictions for an applicant signal.

        Args:
            signal: Validated applicant signal
            stats: Optional counters to update for this run

        Returns:
            AggregationResult with sorted predictions and the lookup outcome
        """
        lookup = self.resolver.resolve(signal.track, signal.exam)
        if stats is not None:
            stats.lookup_stage = lookup.stage.value
            stats.institutions_matched = len(lookup.institutions)

        if not lookup.found:
            return AggregationResult(predictions=[], lookup=lookup)

        logger.info(
            f"🔢 Evaluating {len(lookup.institutions)} colleges for {signal.track} "
            f"({signal.mode.value} {_fmt(signal.value)})"
        )

        evaluations = self._evaluate_all(lookup.institutions, signal)

        predictions: List[Prediction] = []
        for institution_predictions, institution_stats in evaluations:
            predictions.extend(institution_predictions)
            if stats is not None:
                stats.merge(institution_stats)

        predictions.sort(key=lambda p: p.probability, reverse=True)
        logger.info(f"📊 Generated {len(predictions)} predictions")

        return AggregationResult(predictions=predictions, lookup=lookup)

    def _evaluate_all(
        self,
        institutions: List[Institution],
        signal: ApplicantSignal,
    ) -> List[Tuple[List[Prediction], PredictionStats]]:
        def run(institution: Institution):
            return evaluate_institution(institution, signal, self.include_reach)

        if len(institutions) < PARALLEL_EVALUATION_THRESHOLD or self.max_workers <= 1:
            return [run(i) for i in institutions]

        # map() yields in submission order, keeping the final sort deterministic
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(run, institutions))
