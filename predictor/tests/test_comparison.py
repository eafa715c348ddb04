"""
Test the comparison view and college details.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import pytest

from predictor.logic import (
    PredictorEngine,
    ApplicantContext,
    ExamScore,
    Institution,
    CutoffRecord,
    PredictionValidationError,
    InstitutionNotFound,
    build_mock_catalog,
)
from predictor.logic.constants import Track
from predictor.logic.comparison import (
    ComparisonEngine,
    admission_probability,
    apply_boosts,
    calculate_roi,
    generate_pros,
    generate_cons,
)


@pytest.fixture
def catalog():
    return build_mock_catalog()


@pytest.fixture
def context():
    return ApplicantContext(
        category="General",
        home_state="Telangana",
        scores=[ExamScore(exam="JEE Main", rank=2500)],
    )


def test_compare_two_colleges(catalog, context):
    output = ComparisonEngine(catalog).compare(["nit-warangal", "iiit-hyderabad"], context)

    nit, iiit = output.rows
    assert nit.college.id == "nit-warangal"
    assert nit.roi == 360
    assert iiit.roi == 208
    assert nit.fees.total == 185000

    # State quota for the home state boosts 85 -> 97.75, capped at 95
    assert nit.admission_probability == 95
    # Beyond every calibrated boundary for both programs
    assert iiit.admission_probability == 20

    assert output.summary == (
        "NIT Warangal offers the best ROI (360%), while "
        "NIT Warangal is the most affordable option."
    )
    assert [r.type for r in output.recommendations] == [
        "Best ROI",
        "Most Affordable",
        "Highest Probability",
    ]
    assert output.recommendations[2].college.id == "nit-warangal"


def test_probability_never_exceeds_cap(catalog):
    for category in ["General", "OBC", "SC"]:
        context = ApplicantContext(
            category=category,
            home_state="Telangana",
            scores=[ExamScore(exam="JEE Main", rank=1)],
        )
        for institution_id in ["nit-warangal", "iiit-hyderabad"]:
            probability = admission_probability(catalog.find_by_id(institution_id), context)
            assert 0 <= probability <= 95


def test_apply_boosts():
    assert apply_boosts(70, "General", False) == 70
    assert apply_boosts(70, "OBC", False) == pytest.approx(77)
    assert apply_boosts(50, "OBC", True) == pytest.approx(63.25)
    assert apply_boosts(85, "General", True) == 95


def test_cutoffs_for_other_category_do_not_apply(catalog):
    context = ApplicantContext(category="OBC", scores=[ExamScore(exam="JEE Main", rank=100)])
    assert admission_probability(catalog.find_by_id("nit-warangal"), context) == 0


def test_score_for_other_exam_is_ignored(catalog):
    context = ApplicantContext(scores=[ExamScore(exam="NEET", rank=100)])
    assert admission_probability(catalog.find_by_id("iiit-hyderabad"), context) == 0


def test_aggregate_text_probability(catalog):
    context = ApplicantContext(scores=[ExamScore(exam="cuet", percentile=99)])
    # "97–99" -> avg 98; 99 >= 98
    assert admission_probability(catalog.find_by_id("srcc-delhi"), context) == 70


def test_roi_with_zero_tuition(catalog):
    institution = catalog.find_by_id("nit-warangal").model_copy(deep=True)
    institution.fees.tuition_per_year = 0
    assert calculate_roi(institution) == 0


def test_pros_and_cons_are_capped(catalog, context):
    nit = catalog.find_by_id("nit-warangal")
    assert generate_pros(nit, context) == [
        "NAAC A++ accredited",
        "High placement rate",
        "Affordable fees",
    ]
    assert generate_cons(nit, context) == []

    christ = catalog.find_by_id("christ-bangalore")
    assert generate_cons(christ, context) == ["Out of state"]

    osmania = catalog.find_by_id("osmania-medical")
    assert generate_cons(osmania, context) == ["No NAAC accreditation"]

    for institution_id in ["nit-warangal", "iiit-hyderabad", "osmania-medical", "srcc-delhi"]:
        institution = catalog.find_by_id(institution_id)
        assert len(generate_pros(institution, context)) <= 3
        assert len(generate_cons(institution, context)) <= 3


@pytest.mark.parametrize("ids, message", [
    ([], "Please provide at least 2 college IDs for comparison"),
    (["nit-warangal"], "Please provide at least 2 college IDs for comparison"),
    (["a", "b", "c", "d", "e", "f"], "Maximum 5 colleges can be compared at once"),
    (["nit-warangal", "nope"], "Colleges not found: nope"),
])
def test_compare_rejects_bad_ids(catalog, context, ids, message):
    with pytest.raises(PredictionValidationError) as exc_info:
        ComparisonEngine(catalog).compare(ids, context)
    assert exc_info.value.message == message
    assert exc_info.value.field == "college_ids"


def test_college_details(catalog, context):
    engine = PredictorEngine(catalog, include_reach=False)
    detail = engine.college_details("nit-warangal", context)

    assert detail.institution.name == "NIT Warangal"
    assert len(detail.relevant_cutoffs) == 2
    assert detail.admission_probability == 95

    out_of_state = engine.college_details(
        "nit-warangal", ApplicantContext(home_state="Karnataka")
    )
    assert [c.quota for c in out_of_state.relevant_cutoffs] == ["All India"]


def test_college_details_not_found(catalog, context):
    with pytest.raises(InstitutionNotFound) as exc_info:
        PredictorEngine(catalog).college_details("nope", context)
    assert str(exc_info.value) == "College not found: nope"


def test_stacked_boosts_are_capped():
    # 90 * 1.10 * 1.15 = 113.85
    assert apply_boosts(90, "OBC", True) == 95


def test_reserved_category_home_state_quota():
    institution = Institution(
        id="state-college",
        name="State College",
        track=Track.MPC,
        exam_accepted="JEE Main",
        state="Telangana",
        cutoffs=[
            CutoffRecord(exam="JEE Main", category="OBC", quota="State", state="Telangana", opening=2000, closing=6000),
        ],
    )

    def probability(rank):
        context = ApplicantContext(
            category="OBC",
            home_state="Telangana",
            scores=[ExamScore(exam="JEE Main", rank=rank)],
        )
        return admission_probability(institution, context)

    # avg 4000: 70 * 1.10 * 1.15 = 88.55
    assert probability(3900) == 89
    # 85 * 1.10 * 1.15 = 107.525
    assert probability(3000) == 95
