"""
Catalog Readers

Read-only access to the institution catalog. The engine only talks to the
CatalogReader interface:
- SqlCatalog reads the pred_* tables through a SQLAlchemy session
- InMemoryCatalog serves a fixed list of institutions (mock data, tests)

This is a pure READ + TRANSFORM layer:
- NO tiering or probability logic
- NO DB writes
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .constants import MatchStage, Track, ALL_INDIA_QUOTA, coerce_track
from .contracts import (
    Institution,
    Program,
    CutoffRecord,
    FeeStructure,
    OutcomeMetrics,
)
from ..models import PredCollege

logger = logging.getLogger(__name__)


DISTINCT_FIELDS = ("track", "exam_accepted", "state", "institution_type", "college_type")


class CatalogReader(ABC):
    """Read-only catalog interface consumed by the engine."""

    @abstractmethod
    def find_by_track_and_exam(
        self, track: str, exam: str, match: MatchStage = MatchStage.EXACT
    ) -> List[Institution]:
        """Institutions whose track and accepted exam match with the given strategy."""

    @abstractmethod
    def find_by_id(self, institution_id: str) -> Optional[Institution]:
        """Single institution or None."""

    def find_by_ids(self, institution_ids: Iterable[str]) -> List[Institution]:
        found = []
        for institution_id in institution_ids:
            institution = self.find_by_id(institution_id)
            if institution is not None:
                found.append(institution)
        return found

    @abstractmethod
    def distinct(self, field: str, track: Optional[str] = None) -> List[str]:
        """Sorted distinct values of a catalog field, optionally within a track."""


def _check_distinct_field(field: str) -> None:
    if field not in DISTINCT_FIELDS:
        raise ValueError(f"Unsupported distinct field: {field}")


def _track_value(track) -> str:
    return track.value if isinstance(track, Track) else str(track)


# =============================================================================
# SQL CATALOG
# =============================================================================

class SqlCatalog(CatalogReader):
    """Catalog backed by the pred_colleges/pred_branches/pred_cutoffs tables."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_track_and_exam(
        self, track: str, exam: str, match: MatchStage = MatchStage.EXACT
    ) -> List[Institution]:
        track = _track_value(track)
        query = self.db.query(PredCollege)

        if match == MatchStage.EXACT:
            query = query.filter(
                PredCollege.track == track,
                PredCollege.exam_accepted == exam,
            )
        elif match == MatchStage.CASE_INSENSITIVE:
            query = query.filter(
                func.lower(PredCollege.track) == track.lower(),
                func.lower(PredCollege.exam_accepted) == exam.lower(),
            )
        elif match == MatchStage.PARTIAL:
            query = query.filter(
                func.lower(PredCollege.track).contains(track.lower(), autoescape=True),
                func.lower(PredCollege.exam_accepted).contains(exam.lower(), autoescape=True),
            )
        else:
            return []

        rows = query.order_by(PredCollege.id).all()
        return _build_all(rows)

    def find_by_id(self, institution_id: str) -> Optional[Institution]:
        row = self.db.get(PredCollege, institution_id)
        return _build_institution(row) if row else None

    def distinct(self, field: str, track: Optional[str] = None) -> List[str]:
        _check_distinct_field(field)
        column = getattr(PredCollege, field)
        query = self.db.query(column).distinct()
        if track:
            query = query.filter(PredCollege.track == _track_value(track))
        return sorted(value for (value,) in query.all() if value)


def _build_all(rows: List[PredCollege]) -> List[Institution]:
    institutions = []
    for row in rows:
        try:
            institutions.append(_build_institution(row))
        except ValueError as e:
            # Skip rows that fail conversion
            logger.warning(f"⚠️ Skipping catalog row {row.id}: {e}")
    return institutions


def _build_institution(college: PredCollege) -> Institution:
    """
    Build an Institution from database models.
    """
    return Institution(
        id=college.id,
        name=college.name or "",
        track=coerce_track(college.track),
        exam_accepted=college.exam_accepted or "",

        location=college.location or "",
        city=college.city or "",
        state=college.state or "",
        institution_type=college.institution_type or "",
        college_type=college.college_type or "",
        accreditation=college.accreditation or None,

        fees=FeeStructure(
            tuition_per_year=college.tuition_fee_per_year or 0.0,
            hostel_per_year=college.hostel_fee_per_year or 0.0,
            program_years=college.program_years or FeeStructure().program_years,
        ),
        outcomes=OutcomeMetrics(
            placement_rate=college.placement_rate,
            average_package=college.average_package or 0.0,
            median_package=college.median_package,
            highest_package=college.highest_package or 0.0,
        ),

        closing_rank=college.closing_rank,
        closing_percentile=college.closing_percentile,
        programs=[
            Program(name=b.name, closing_min=b.closing_min, closing_max=b.closing_max)
            for b in college.branches
        ],
        cutoffs=[
            CutoffRecord(
                exam=c.exam,
                category=c.category,
                quota=c.quota or ALL_INDIA_QUOTA,
                state=c.state,
                opening=c.opening,
                closing=c.closing,
            )
            for c in college.cutoffs
        ],
    )


# =============================================================================
# IN-MEMORY CATALOG
# =============================================================================

class InMemoryCatalog(CatalogReader):
    """Catalog over a fixed list of institutions, kept in insertion order."""

    def __init__(self, institutions: Optional[Iterable[Institution]] = None):
        self._institutions: List[Institution] = list(institutions or [])

    def find_by_track_and_exam(
        self, track: str, exam: str, match: MatchStage = MatchStage.EXACT
    ) -> List[Institution]:
        track = _track_value(track)
        return [i for i in self._institutions if _matches(i, track, exam, match)]

    def find_by_id(self, institution_id: str) -> Optional[Institution]:
        for institution in self._institutions:
            if institution.id == institution_id:
                return institution
        return None

    def distinct(self, field: str, track: Optional[str] = None) -> List[str]:
        _check_distinct_field(field)
        values = set()
        for institution in self._institutions:
            if track and institution.track != _track_value(track):
                continue
            value = getattr(institution, field)
            if value:
                values.add(value)
        return sorted(values)


def _matches(institution: Institution, track: str, exam: str, match: MatchStage) -> bool:
    if match == MatchStage.EXACT:
        return institution.track == track and institution.exam_accepted == exam
    if match == MatchStage.CASE_INSENSITIVE:
        return (
            institution.track.lower() == track.lower()
            and institution.exam_accepted.lower() == exam.lower()
        )
    if match == MatchStage.PARTIAL:
        return (
            track.lower() in institution.track.lower()
            and exam.lower() in institution.exam_accepted.lower()
        )
    return False


def build_mock_catalog() -> InMemoryCatalog:
    """
    Small catalog for running the engine without a database.
    """
    institutions = [
        Institution(
            id="nit-warangal",
            name="NIT Warangal",
            track=Track.MPC,
            exam_accepted="JEE Main",
            location="Warangal, Telangana",
            city="Warangal",
            state="Telangana",
            institution_type="government",
            college_type="NIT",
            accreditation="A++",
            fees=FeeStructure(tuition_per_year=125000, hostel_per_year=60000),
            outcomes=OutcomeMetrics(placement_rate=92, average_package=1800000, highest_package=5200000),
            programs=[
                Program(name="Computer Science and Engineering", closing_min=1500, closing_max=3500),
                Program(name="Electronics and Communication Engineering", closing_min=3000, closing_max=6000),
                Program(name="Mechanical Engineering", closing_min=8000, closing_max=14000),
            ],
            cutoffs=[
                CutoffRecord(exam="JEE Main", category="General", quota="State", state="Telangana", opening=2000, closing=6000),
                CutoffRecord(exam="JEE Main", category="General", quota="All India", opening=1500, closing=4500),
            ],
        ),
        Institution(
            id="iiit-hyderabad",
            name="IIIT Hyderabad",
            track=Track.MPC,
            exam_accepted="JEE Main",
            location="Gachibowli, Hyderabad",
            city="Hyderabad",
            state="Telangana",
            institution_type="deemed",
            college_type="IIIT",
            accreditation="A",
            fees=FeeStructure(tuition_per_year=360000, hostel_per_year=90000),
            outcomes=OutcomeMetrics(placement_rate=98, average_package=3000000, highest_package=7500000),
            programs=[
                Program(name="Computer Science and Engineering", closing_min=300, closing_max=900),
                Program(name="Electronics and Communication Engineering", closing_min=900, closing_max=2000),
            ],
        ),
        Institution(
            id="osmania-medical",
            name="Osmania Medical College",
            track=Track.BIPC,
            exam_accepted="NEET",
            location="Koti, Hyderabad",
            city="Hyderabad",
            state="Telangana",
            institution_type="government",
            college_type="Medical",
            fees=FeeStructure(tuition_per_year=10000, hostel_per_year=20000, program_years=5),
            outcomes=OutcomeMetrics(placement_rate=None, average_package=900000),
            closing_rank="1,200-4,800",
        ),
        Institution(
            id="srcc-delhi",
            name="Shri Ram College of Commerce",
            track=Track.MEC,
            exam_accepted="CUET",
            location="Delhi",
            city="New Delhi",
            state="Delhi",
            institution_type="government",
            college_type="Management",
            accreditation="A++",
            fees=FeeStructure(tuition_per_year=30000, program_years=3),
            outcomes=OutcomeMetrics(placement_rate=85, average_package=1000000, highest_package=3000000),
            closing_percentile="97–99",
        ),
        Institution(
            id="christ-bangalore",
            name="Christ University",
            track=Track.HEC,
            exam_accepted="CUET",
            location="Hosur Road, Bengaluru",
            city="Bengaluru",
            state="Karnataka",
            institution_type="deemed",
            college_type="Arts",
            accreditation="A+",
            fees=FeeStructure(tuition_per_year=220000, program_years=3),
            outcomes=OutcomeMetrics(placement_rate=70, average_package=550000),
            closing_percentile="85-90",
        ),
        Institution(
            id="nalsar-hyderabad",
            name="NALSAR University of Law",
            track=Track.CEC,
            exam_accepted="CLAT",
            location="Shameerpet, Hyderabad",
            city="Hyderabad",
            state="Telangana",
            institution_type="government",
            college_type="Law",
            accreditation="A",
            fees=FeeStructure(tuition_per_year=260000, program_years=5),
            outcomes=OutcomeMetrics(placement_rate=88, average_package=1600000),
            closing_rank="50-200",
        ),
    ]
    return InMemoryCatalog(institutions)
