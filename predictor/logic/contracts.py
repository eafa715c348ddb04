"""
Data Contracts for the Admission Predictor

Defines Pydantic models for the catalog entities (Institution, Program),
the applicant input (ApplicantSignal, ApplicantContext) and the engine
outputs (Prediction, ComparisonRow, ScenarioResult).
These contracts are the API boundary for the prediction engine.
"""

from typing import List, Optional, Dict
from pydantic import BaseModel, Field, model_validator

from .constants import (
    Track,
    Tier,
    ComparatorMode,
    MatchStage,
    TRACK_MODE,
    DEFAULT_CATEGORY,
    DEFAULT_PROGRAM_YEARS,
    ALL_INDIA_QUOTA,
    DATA_QUALITY_EXACT,
)


# =============================================================================
# CATALOG ENTITIES
# =============================================================================

class Program(BaseModel):
    """A branch/program owned by one institution, with its own closing window."""
    name: str
    closing_min: float
    closing_max: float


class CutoffRecord(BaseModel):
    """Category/quota specific cutoff published by an institution."""
    exam: str
    category: Optional[str] = None
    quota: str = ALL_INDIA_QUOTA
    state: Optional[str] = None
    opening: float
    closing: float


class FeeStructure(BaseModel):
    tuition_per_year: float = 0.0
    hostel_per_year: float = 0.0
    program_years: int = DEFAULT_PROGRAM_YEARS

    @property
    def total_per_year(self) -> float:
        return self.tuition_per_year + self.hostel_per_year


class OutcomeMetrics(BaseModel):
    placement_rate: Optional[float] = None
    average_package: float = 0.0
    median_package: Optional[float] = None
    highest_package: float = 0.0


class Institution(BaseModel):
    """
    Read-only catalog entry.
    Carries either aggregate cutoff text (closing_rank / closing_percentile)
    or a list of programs with numeric bounds.
    """
    id: str
    name: str
    track: Track
    exam_accepted: str

    location: str = ""
    city: str = ""
    state: str = ""
    institution_type: str = ""
    college_type: str = ""
    accreditation: Optional[str] = None

    fees: FeeStructure = Field(default_factory=FeeStructure)
    outcomes: OutcomeMetrics = Field(default_factory=OutcomeMetrics)

    closing_rank: Optional[str] = None
    closing_percentile: Optional[str] = None
    programs: List[Program] = Field(default_factory=list)
    cutoffs: List[CutoffRecord] = Field(default_factory=list)

    class Config:
        use_enum_values = True

    @property
    def mode(self) -> ComparatorMode:
        return TRACK_MODE[Track(self.track)]

    def aggregate_cutoff_text(self) -> Optional[str]:
        """Aggregate cutoff text in the unit of this institution's track."""
        if self.mode == ComparatorMode.RANK:
            return self.closing_rank
        return self.closing_percentile


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class ApplicantSignal(BaseModel):
    """
    Input contract for the prediction engine.
    Exactly one of rank/percentile is set, matching the track's mode.
    """
    track: Track
    exam: str
    rank: Optional[int] = None
    percentile: Optional[float] = None
    category: str = DEFAULT_CATEGORY
    home_state: Optional[str] = None

    class Config:
        use_enum_values = True

    @model_validator(mode="after")
    def _check_signal_matches_mode(self):
        mode = TRACK_MODE[Track(self.track)]
        if mode == ComparatorMode.RANK:
            if self.rank is None or self.percentile is not None:
                raise ValueError(f"Track {self.track} expects a rank and no percentile")
        else:
            if self.percentile is None or self.rank is not None:
                raise ValueError(f"Track {self.track} expects a percentile and no rank")
        return self

    @property
    def mode(self) -> ComparatorMode:
        return TRACK_MODE[Track(self.track)]

    @property
    def value(self) -> float:
        """The populated signal, rank or percentile."""
        return self.rank if self.mode == ComparatorMode.RANK else self.percentile


class ExamScore(BaseModel):
    exam: str
    rank: Optional[int] = None
    percentile: Optional[float] = None


class ApplicantContext(BaseModel):
    """Applicant context used by comparison and detail views."""
    category: str = DEFAULT_CATEGORY
    home_state: Optional[str] = None
    scores: List[ExamScore] = Field(default_factory=list)


class Scenario(BaseModel):
    name: Optional[str] = None
    signal: ApplicantSignal


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class Prediction(BaseModel):
    """Single tiered admission prediction for an institution or one of its programs."""
    institution_id: Optional[str] = None
    institution_name: str
    city: str = ""
    state: str = ""
    program: Optional[str] = None

    tier: Tier
    probability: int = Field(ge=0, le=100)
    reason: str = ""
    data_quality: str = DATA_QUALITY_EXACT

    closing_min: Optional[float] = None
    closing_max: Optional[float] = None

    class Config:
        use_enum_values = True

    @property
    def institution_key(self) -> str:
        return self.institution_id or self.institution_name


class PredictionStats(BaseModel):
    """
    Observability counters for one prediction run.
    Passed in by the caller; the engine only increments it.
    """
    lookup_stage: str = MatchStage.NONE.value
    institutions_matched: int = 0
    programs_evaluated: int = 0
    predictions_emitted: int = 0
    dropped_out_of_range: int = 0
    missing_cutoff: int = 0
    parse_fallbacks: int = 0

    def merge(self, other: "PredictionStats") -> None:
        self.programs_evaluated += other.programs_evaluated
        self.predictions_emitted += other.predictions_emitted
        self.dropped_out_of_range += other.dropped_out_of_range
        self.missing_cutoff += other.missing_cutoff
        self.parse_fallbacks += other.parse_fallbacks


class PredictionSummary(BaseModel):
    total_predictions: int = 0
    unique_institutions: int = 0
    safe_count: int = 0
    moderate_count: int = 0
    ambitious_count: int = 0
    track: str
    exam: str
    rank: Optional[int] = None
    percentile: Optional[float] = None
    input_type: str
    match_stage: str = MatchStage.NONE.value
    fallback_predictions: int = 0
    available_exams: List[str] = Field(default_factory=list)
    explanation: str = ""


class PredictionOutput(BaseModel):
    safe: List[Prediction] = Field(default_factory=list)
    moderate: List[Prediction] = Field(default_factory=list)
    ambitious: List[Prediction] = Field(default_factory=list)
    summary: PredictionSummary
    source: str = "catalog"
    warnings: List[str] = Field(default_factory=list)
    stats: Optional[PredictionStats] = None

    @property
    def all_predictions(self) -> List[Prediction]:
        return sorted(
            self.safe + self.moderate + self.ambitious,
            key=lambda p: p.probability,
            reverse=True,
        )


class InstitutionBrief(BaseModel):
    id: str
    name: str
    location: str = ""
    state: str = ""
    type: str = ""
    accreditation: Optional[str] = None


class ComparisonFees(BaseModel):
    tuition: float = 0.0
    hostel: float = 0.0
    total: float = 0.0


class ComparisonPlacement(BaseModel):
    average_package: float = 0.0
    highest_package: float = 0.0
    placement_rate: Optional[float] = None


class ComparisonRow(BaseModel):
    college: InstitutionBrief
    fees: ComparisonFees
    placement: ComparisonPlacement
    admission_probability: int = 0
    roi: int = 0
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)


class ComparisonRecommendation(BaseModel):
    type: str
    college: InstitutionBrief


class ComparisonOutput(BaseModel):
    rows: List[ComparisonRow]
    summary: str
    recommendations: List[ComparisonRecommendation] = Field(default_factory=list)


class ScenarioResult(BaseModel):
    scenario: str
    signal: ApplicantSignal
    predictions: Dict[str, List[Prediction]] = Field(default_factory=dict)
    counts: Dict[str, int] = Field(default_factory=dict)
    total_options: int = 0
    best_option: Optional[Prediction] = None


class SweepOutput(BaseModel):
    scenarios: List[ScenarioResult] = Field(default_factory=list)
    insights: List[str] = Field(default_factory=list)
    truncated: bool = False
    warnings: List[str] = Field(default_factory=list)


class CollegeDetail(BaseModel):
    institution: Institution
    relevant_cutoffs: List[CutoffRecord] = Field(default_factory=list)
    admission_probability: int = 0
