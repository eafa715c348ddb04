"""
Comparison Engine

Side-by-side view of 2-5 institutions for one applicant: fees, placement,
ROI, admission probability and rule-based pros/cons.
"""

import logging
from typing import List, Optional, Tuple

from .catalog import CatalogReader
from .comparators import probability_for
from .constants import (
    ComparatorMode,
    DEFAULT_CATEGORY,
    STATE_QUOTA,
    RESERVED_CATEGORY_BOOST,
    HOME_STATE_BOOST,
    BOOSTED_PROBABILITY_CAP,
    MIN_COMPARE_INSTITUTIONS,
    MAX_COMPARE_INSTITUTIONS,
    TOP_ACCREDITATION,
    HIGH_PLACEMENT_RATE,
    LOW_PLACEMENT_RATE,
    AFFORDABLE_TUITION,
    HIGH_TUITION,
    GOVERNMENT_TYPE,
    MAX_PROS,
    MAX_CONS,
)
from .contracts import (
    ApplicantContext,
    ComparisonFees,
    ComparisonOutput,
    ComparisonPlacement,
    ComparisonRecommendation,
    ComparisonRow,
    CutoffRecord,
    ExamScore,
    Institution,
    InstitutionBrief,
)
from .errors import PredictionValidationError
from .range_parser import resolve_bounds

logger = logging.getLogger(__name__)


# =============================================================================
# ADMISSION PROBABILITY
# =============================================================================

def relevant_cutoffs(institution: Institution, context: ApplicantContext) -> List[CutoffRecord]:
    """Cutoffs for the applicant's category; state quotas only for the home state."""
    relevant = []
    for cutoff in institution.cutoffs:
        if cutoff.category and cutoff.category != context.category:
            continue
        if cutoff.quota == STATE_QUOTA and cutoff.state != context.home_state:
            continue
        relevant.append(cutoff)
    return relevant


def _score_value(score: ExamScore, mode: ComparatorMode) -> Optional[float]:
    return score.rank if mode == ComparatorMode.RANK else score.percentile


def apply_boosts(
    probability: float,
    category: str,
    home_state_quota: bool,
) -> float:
    """Category and home-state boosts, capped at BOOSTED_PROBABILITY_CAP."""
    if category != DEFAULT_CATEGORY:
        probability *= RESERVED_CATEGORY_BOOST
    if home_state_quota:
        probability *= HOME_STATE_BOOST
    return min(probability, BOOSTED_PROBABILITY_CAP)


def _bound_pairs(
    institution: Institution,
    context: ApplicantContext,
) -> List[Tuple[str, float, float, bool]]:
    """(exam, min, max, home_state_quota) windows to compare the applicant against."""
    cutoffs = relevant_cutoffs(institution, context)
    if cutoffs:
        return [
            (
                c.exam,
                min(c.opening, c.closing),
                max(c.opening, c.closing),
                c.quota == STATE_QUOTA and c.state == context.home_state,
            )
            for c in cutoffs
        ]

    if institution.cutoffs:
        # Published cutoffs exist but none apply to this applicant
        return []

    if institution.programs:
        return [
            (institution.exam_accepted, p.closing_min, p.closing_max, False)
            for p in institution.programs
        ]

    text = institution.aggregate_cutoff_text()
    if text and text.strip():
        min_closing, max_closing, _ = resolve_bounds(text, institution.mode)
        return [(institution.exam_accepted, min_closing, max_closing, False)]

    return []


def admission_probability(institution: Institution, context: ApplicantContext) -> int:
    """
    Best boosted probability across the applicant's exam scores.

    Returns 0 when no score matches a relevant cutoff.
    """
    mode = institution.mode
    best = 0.0

    for exam, min_closing, max_closing, home_state_quota in _bound_pairs(institution, context):
        for score in context.scores:
            if score.exam.strip().lower() != exam.strip().lower():
                continue
            value = _score_value(score, mode)
            if value is None:
                continue
            probability = probability_for(mode, value, min_closing, max_closing)
            best = max(best, apply_boosts(probability, context.category, home_state_quota))

    return round(best)


# =============================================================================
# ROI, PROS & CONS
# =============================================================================

def calculate_roi(institution: Institution) -> int:
    """Average annual package over the total multi-year tuition, in percent."""
    total_cost = institution.fees.tuition_per_year * institution.fees.program_years
    if total_cost <= 0:
        return 0
    return round(institution.outcomes.average_package / total_cost * 100)


def generate_pros(institution: Institution, context: ApplicantContext) -> List[str]:
    pros = []
    placement_rate = institution.outcomes.placement_rate
    tuition = institution.fees.tuition_per_year

    if institution.accreditation == TOP_ACCREDITATION:
        pros.append(f"NAAC {TOP_ACCREDITATION} accredited")
    if placement_rate is not None and placement_rate > HIGH_PLACEMENT_RATE:
        pros.append("High placement rate")
    if 0 < tuition < AFFORDABLE_TUITION:
        pros.append("Affordable fees")
    if context.home_state and institution.state == context.home_state:
        pros.append("Home state advantage")
    if institution.institution_type.lower() == GOVERNMENT_TYPE:
        pros.append("Government institution")

    return pros[:MAX_PROS]


def generate_cons(institution: Institution, context: ApplicantContext) -> List[str]:
    cons = []
    placement_rate = institution.outcomes.placement_rate

    if institution.fees.tuition_per_year > HIGH_TUITION:
        cons.append("High fees")
    if placement_rate is not None and placement_rate < LOW_PLACEMENT_RATE:
        cons.append("Lower placement rate")
    if context.home_state and institution.state != context.home_state:
        cons.append("Out of state")
    if not institution.accreditation:
        cons.append("No NAAC accreditation")

    return cons[:MAX_CONS]


# =============================================================================
# ENGINE
# =============================================================================

def _brief(institution: Institution) -> InstitutionBrief:
    return InstitutionBrief(
        id=institution.id,
        name=institution.name,
        location=institution.location,
        state=institution.state,
        type=institution.institution_type,
        accreditation=institution.accreditation,
    )


def build_row(institution: Institution, context: ApplicantContext) -> ComparisonRow:
    fees = institution.fees
    outcomes = institution.outcomes
    return ComparisonRow(
        college=_brief(institution),
        fees=ComparisonFees(
            tuition=fees.tuition_per_year,
            hostel=fees.hostel_per_year,
            total=fees.total_per_year,
        ),
        placement=ComparisonPlacement(
            average_package=outcomes.average_package,
            highest_package=outcomes.highest_package,
            placement_rate=outcomes.placement_rate,
        ),
        admission_probability=admission_probability(institution, context),
        roi=calculate_roi(institution),
        pros=generate_pros(institution, context),
        cons=generate_cons(institution, context),
    )


def _best_roi(rows: List[ComparisonRow]) -> ComparisonRow:
    return max(rows, key=lambda r: r.roi)


def _most_affordable(rows: List[ComparisonRow]) -> ComparisonRow:
    return min(rows, key=lambda r: r.fees.total)


def _highest_probability(rows: List[ComparisonRow]) -> ComparisonRow:
    return max(rows, key=lambda r: r.admission_probability)


def summarize(rows: List[ComparisonRow]) -> str:
    best_roi = _best_roi(rows)
    most_affordable = _most_affordable(rows)
    return (
        f"{best_roi.college.name} offers the best ROI ({best_roi.roi}%), while "
        f"{most_affordable.college.name} is the most affordable option."
    )


def recommend(rows: List[ComparisonRow]) -> List[ComparisonRecommendation]:
    return [
        ComparisonRecommendation(type="Best ROI", college=_best_roi(rows).college),
        ComparisonRecommendation(type="Most Affordable", college=_most_affordable(rows).college),
        ComparisonRecommendation(type="Highest Probability", college=_highest_probability(rows).college),
    ]


class ComparisonEngine:
    """Compares a small fixed set of institutions for one applicant."""

    def __init__(self, catalog: CatalogReader):
        self.catalog = catalog

    def compare(
        self,
        institution_ids: List[str],
        context: ApplicantContext,
    ) -> ComparisonOutput:
        if not institution_ids or len(institution_ids) < MIN_COMPARE_INSTITUTIONS:
            raise PredictionValidationError(
                f"Please provide at least {MIN_COMPARE_INSTITUTIONS} college IDs for comparison",
                field="college_ids",
            )
        if len(institution_ids) > MAX_COMPARE_INSTITUTIONS:
            raise PredictionValidationError(
                f"Maximum {MAX_COMPARE_INSTITUTIONS} colleges can be compared at once",
                field="college_ids",
            )

        institutions = []
        missing = []
        for institution_id in institution_ids:
            institution = self.catalog.find_by_id(institution_id)
            if institution is None:
                missing.append(institution_id)
            else:
                institutions.append(institution)

        if missing:
            raise PredictionValidationError(
                f"Colleges not found: {', '.join(missing)}",
                field="college_ids",
            )

        rows = [build_row(institution, context) for institution in institutions]
        logger.info(f"⚖️ Compared {len(rows)} colleges")

        return ComparisonOutput(
            rows=rows,
            summary=summarize(rows),
            recommendations=recommend(rows),
        )
