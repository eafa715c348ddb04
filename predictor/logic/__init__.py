"""
Predictor Logic Module

Provides the deterministic admission-probability engine: range parsing,
rank/percentile comparators, catalog lookup, aggregation, comparison and
what-if sweeps.
"""

from .contracts import (
    ApplicantSignal,
    ApplicantContext,
    ExamScore,
    Institution,
    Program,
    CutoffRecord,
    Prediction,
    PredictionOutput,
    PredictionStats,
    ComparisonRow,
    ComparisonOutput,
    Scenario,
    ScenarioResult,
    SweepOutput,
)
from .catalog import CatalogReader, SqlCatalog, InMemoryCatalog, build_mock_catalog
from .engine import PredictorEngine
from .errors import PredictionValidationError, InstitutionNotFound
from .constants import Track, Tier, ComparatorMode

__all__ = [
    # Main engine
    "PredictorEngine",

    # Catalog access
    "CatalogReader",
    "SqlCatalog",
    "InMemoryCatalog",
    "build_mock_catalog",

    # Contracts
    "ApplicantSignal",
    "ApplicantContext",
    "ExamScore",
    "Institution",
    "Program",
    "CutoffRecord",
    "Prediction",
    "PredictionOutput",
    "PredictionStats",
    "ComparisonRow",
    "ComparisonOutput",
    "Scenario",
    "ScenarioResult",
    "SweepOutput",

    # Errors
    "PredictionValidationError",
    "InstitutionNotFound",

    # Enums
    "Track",
    "Tier",
    "ComparatorMode",
]
