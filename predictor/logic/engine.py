"""
Predictor Engine

Main orchestrator that combines lookup, comparators, aggregation and the
comparison/what-if views. This is the primary entry point used by the
routes.
"""

import logging
import time
from typing import Any, List, Optional

from .aggregator import PredictionAggregator
from .catalog import CatalogReader
from .comparison import ComparisonEngine, relevant_cutoffs, admission_probability
from .constants import MatchStage
from .contracts import (
    ApplicantContext,
    ApplicantSignal,
    CollegeDetail,
    ComparisonOutput,
    PredictionOutput,
    PredictionStats,
    SweepOutput,
)
from .errors import InstitutionNotFound
from .output_assembler import assemble_output
from .scenarios import ScenarioSweepEngine
from .validation import build_signal, build_scenarios

logger = logging.getLogger(__name__)

STRATEGY_CATALOG = "catalog"
STRATEGY_AI = "ai"


class PredictorEngine:
    """
    Admission predictor over a read-only catalog.

    Pipeline flow for predict():
    1. Validation - build an ApplicantSignal from request values
    2. Strategy - optional AI predictor, falling back to the catalog
    3. Aggregation - lookup cascade + comparator per program
    4. Output Assembly - tiers, counts and explanation
    """

    def __init__(
        self,
        catalog: CatalogReader,
        ai_predictor=None,
        include_reach: Optional[bool] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the predictor engine.

        Args:
            catalog: Read-only catalog access
            ai_predictor: Optional AIPredictor used by the "ai" strategy
            include_reach: Override settings.INCLUDE_REACH_TIER
            max_workers: Thread pool size for large catalogs
        """
        self.catalog = catalog
        self.ai_predictor = ai_predictor
        self.aggregator = PredictionAggregator(
            catalog, max_workers=max_workers, include_reach=include_reach
        )
        self.comparison = ComparisonEngine(catalog)
        self.sweeper = ScenarioSweepEngine(self.aggregator)

    def predict(
        self,
        track: Any,
        exam: Any,
        rank: Any = None,
        percentile: Any = None,
        category: Optional[str] = None,
        home_state: Optional[str] = None,
        strategy: str = STRATEGY_CATALOG,
        stats: Optional[PredictionStats] = None,
    ) -> PredictionOutput:
        """
        Predict admission tiers for every matching college.

        Raises:
            PredictionValidationError: missing/invalid track, exam, rank or percentile
        """
        signal = build_signal(track, exam, rank, percentile, category, home_state)
        return self.predict_signal(signal, strategy=strategy, stats=stats)

    def predict_signal(
        self,
        signal: ApplicantSignal,
        strategy: str = STRATEGY_CATALOG,
        stats: Optional[PredictionStats] = None,
    ) -> PredictionOutput:
        start_time = time.perf_counter()
        stats = stats if stats is not None else PredictionStats()
        warnings: List[str] = []

        logger.info(
            f"🚀 Predicting for stream={signal.track} exam={signal.exam!r} "
            f"{signal.mode.value}={signal.value:g} strategy={strategy}"
        )

        if strategy == STRATEGY_AI:
            ai_output = self._predict_with_ai(signal, stats)
            if ai_output is not None:
                return ai_output
            warnings.append("AI predictions unavailable; showing catalog-based predictions.")

        result = self.aggregator.aggregate(signal, stats=stats)

        available_exams: List[str] = []
        if not result.lookup.found:
            available_exams = self.catalog.distinct("exam_accepted", track=signal.track)

        output = assemble_output(
            signal=signal,
            predictions=result.predictions,
            match_stage=result.lookup.stage,
            institutions_matched=len(result.lookup.institutions),
            available_exams=available_exams,
            stats=stats,
            source=STRATEGY_CATALOG,
            warnings=warnings,
        )

        processing_time = (time.perf_counter() - start_time) * 1000
        logger.info(f"✨ Prediction complete ({processing_time:.2f}ms)")
        return output

    def _predict_with_ai(
        self,
        signal: ApplicantSignal,
        stats: PredictionStats,
    ) -> Optional[PredictionOutput]:
        if self.ai_predictor is None:
            logger.warning("⚠️ AI strategy requested but no AI predictor is configured")
            return None

        predictions = self.ai_predictor.predict(signal)
        if not predictions:
            logger.warning("⚠️ AI predictions failed or empty, using catalog fallback")
            return None

        predictions = sorted(predictions, key=lambda p: p.probability, reverse=True)
        stats.predictions_emitted = len(predictions)
        return assemble_output(
            signal=signal,
            predictions=predictions,
            match_stage=MatchStage.NONE,
            stats=stats,
            source=STRATEGY_AI,
            warnings=["AI-generated predictions are estimates and are not based on catalog cutoffs."],
        )

    def compare(self, institution_ids: List[str], context: ApplicantContext) -> ComparisonOutput:
        """
        Raises:
            PredictionValidationError: fewer than 2 / more than 5 ids, or unknown ids
        """
        return self.comparison.compare(institution_ids, context)

    def what_if(
        self,
        scenarios: Any,
        deadline_seconds: Optional[float] = None,
        cancel_event=None,
    ) -> SweepOutput:
        """
        Raises:
            PredictionValidationError: malformed scenario list or signal
        """
        validated = build_scenarios(scenarios)
        return self.sweeper.sweep(validated, deadline_seconds=deadline_seconds, cancel_event=cancel_event)

    def college_details(self, institution_id: str, context: ApplicantContext) -> CollegeDetail:
        """
        Raises:
            InstitutionNotFound: unknown id
        """
        institution = self.catalog.find_by_id(institution_id)
        if institution is None:
            raise InstitutionNotFound(institution_id)

        return CollegeDetail(
            institution=institution,
            relevant_cutoffs=relevant_cutoffs(institution, context),
            admission_probability=admission_probability(institution, context),
        )

    def available_exams(self, track: Optional[str] = None) -> List[str]:
        return self.catalog.distinct("exam_accepted", track=track)
