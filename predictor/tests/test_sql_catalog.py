"""
Test the SQLAlchemy-backed catalog against an in-memory SQLite database.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from predictor.logic import PredictorEngine, SqlCatalog
from predictor.logic.constants import MatchStage
from predictor.logic.lookup import CatalogLookupResolver
from predictor.models import Base, PredCollege, PredBranch, PredCutoff


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()

    session.add_all([
        PredCollege(
            id="nit-warangal",
            name="NIT Warangal",
            track="MPC",
            exam_accepted="JEE Main",
            city="Warangal",
            state="Telangana",
            institution_type="government",
            college_type="NIT",
            accreditation="A++",
            tuition_fee_per_year=125000,
            hostel_fee_per_year=60000,
            placement_rate=92,
            average_package=1800000,
            branches=[
                PredBranch(name="Computer Science and Engineering", closing_min=1500, closing_max=3500),
                PredBranch(name="Mechanical Engineering", closing_min=8000, closing_max=14000),
            ],
            cutoffs=[
                PredCutoff(exam="JEE Main", category="General", quota="State", state="Telangana", opening=2000, closing=6000),
            ],
        ),
        PredCollege(
            id="kl-university",
            name="KL University",
            track="mpc",
            exam_accepted="jee main",
            state="Andhra Pradesh",
            institution_type="deemed",
            closing_rank="20,000-60,000",
        ),
        PredCollege(
            id="srcc-delhi",
            name="Shri Ram College of Commerce",
            track="MEC",
            exam_accepted="CUET",
            state="Delhi",
            closing_percentile="97-99",
        ),
        PredCollege(
            id="broken-row",
            name="Broken Row",
            track="MPCX",
            exam_accepted="JEE Main",
        ),
    ])
    session.commit()

    yield session

    session.close()
    engine.dispose()


def test_exact_match(db):
    institutions = SqlCatalog(db).find_by_track_and_exam("MPC", "JEE Main", MatchStage.EXACT)
    assert [i.id for i in institutions] == ["nit-warangal"]


def test_case_insensitive_match(db):
    institutions = SqlCatalog(db).find_by_track_and_exam("MPC", "JEE MAIN", MatchStage.CASE_INSENSITIVE)
    assert [i.id for i in institutions] == ["kl-university", "nit-warangal"]
    # Track codes are normalised on the way out
    assert {i.track for i in institutions} == {"MPC"}


def test_partial_match_skips_invalid_rows(db):
    institutions = SqlCatalog(db).find_by_track_and_exam("MPC", "jee", MatchStage.PARTIAL)
    assert [i.id for i in institutions] == ["kl-university", "nit-warangal"]


def test_resolver_over_sql(db):
    result = CatalogLookupResolver(SqlCatalog(db)).resolve("MPC", "jee main")
    assert result.stage == MatchStage.CASE_INSENSITIVE
    assert len(result.institutions) == 2


def test_find_by_id_builds_nested_entities(db):
    institution = SqlCatalog(db).find_by_id("nit-warangal")

    assert institution.name == "NIT Warangal"
    assert [p.name for p in institution.programs] == [
        "Computer Science and Engineering",
        "Mechanical Engineering",
    ]
    assert institution.cutoffs[0].quota == "State"
    assert institution.fees.total_per_year == 185000
    assert institution.fees.program_years == 4
    assert SqlCatalog(db).find_by_id("missing") is None


def test_distinct(db):
    catalog = SqlCatalog(db)
    assert catalog.distinct("exam_accepted", track="MEC") == ["CUET"]
    assert catalog.distinct("state") == ["Andhra Pradesh", "Delhi", "Telangana"]
    with pytest.raises(ValueError):
        catalog.distinct("closing_rank")


def test_engine_over_sql_catalog(db):
    output = PredictorEngine(SqlCatalog(db), include_reach=False).predict("MPC", "JEE Main", rank=1900)
    assert output.summary.unique_institutions == 1
    assert [p.program for p in output.safe] == [
        "Mechanical Engineering",
        "Computer Science and Engineering",
    ]
