"""
College Predictor API Routes

Exposes the admission predictor via REST API:
- POST /college-predictor/predict
- POST /college-predictor/compare
- POST /college-predictor/what-if
- POST /college-predictor/college/{college_id}
- GET  /college-predictor/exams
"""

import logging
from typing import Optional, List, Dict, Any
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from config import settings
from db import get_db
from .logic.catalog import CatalogReader, SqlCatalog
from .logic.constants import DEFAULT_CATEGORY, coerce_track
from .logic.contracts import ApplicantContext, ExamScore
from .logic.engine import PredictorEngine, STRATEGY_CATALOG
from .logic.errors import PredictionValidationError, InstitutionNotFound
from .ai.predictor import AIPredictor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/college-predictor", tags=["college-predictor"])

ai_predictor = AIPredictor() if settings.AI_PREDICTIONS_ENABLED else None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_catalog(db: Session = Depends(get_db)) -> CatalogReader:
    return SqlCatalog(db)


def get_engine(catalog: CatalogReader = Depends(get_catalog)) -> PredictorEngine:
    return PredictorEngine(catalog, ai_predictor=ai_predictor)


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class PredictRequest(BaseModel):
    """Request body for the predict endpoint."""
    track: Optional[str] = Field(default=None, description="Stream: MPC, BiPC, MEC, CEC or HEC", examples=["MPC"])
    exam: Optional[str] = Field(default=None, description="Entrance exam", examples=["JEE Main"])
    rank: Optional[int] = Field(default=None, description="Rank (MPC, BiPC, CEC)")
    percentile: Optional[float] = Field(default=None, description="Percentile (MEC, HEC)")
    category: str = DEFAULT_CATEGORY
    home_state: Optional[str] = None
    strategy: str = Field(default=STRATEGY_CATALOG, description="'catalog' or 'ai'")


class CompareRequest(BaseModel):
    college_ids: List[str] = Field(default_factory=list, description="2 to 5 college IDs")
    category: str = DEFAULT_CATEGORY
    home_state: Optional[str] = None
    scores: List[ExamScore] = Field(default_factory=list)


class WhatIfRequest(BaseModel):
    scenarios: List[Dict[str, Any]] = Field(
        default_factory=list,
        examples=[[
            {"name": "Current", "signal": {"track": "MPC", "exam": "JEE Main", "rank": 5000}},
            {"name": "Improved", "signal": {"track": "MPC", "exam": "JEE Main", "rank": 2000}},
        ]],
    )
    deadline_seconds: Optional[float] = Field(default=None, gt=0)


def _bad_request(error: PredictionValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail=error.message)


def _server_error(action: str) -> JSONResponse:
    logger.exception(f"Error {action}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": f"Failed to {action}"},
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/predict", summary="Predict colleges from stream, exam and rank/percentile")
def predict_colleges(request: PredictRequest, engine: PredictorEngine = Depends(get_engine)):
    """
    Tiered admission predictions for every college accepting the exam.

    **Response:**
    - `predictions`: Safe / Moderate / Ambitious lists sorted by probability
    - `summary`: counts, distinct colleges and an explanation (also on zero matches)
    """
    try:
        output = engine.predict(
            request.track,
            request.exam,
            rank=request.rank,
            percentile=request.percentile,
            category=request.category,
            home_state=request.home_state,
            strategy=request.strategy,
        )
        data = output.model_dump(mode="json")
        return {
            "success": True,
            "predictions": {
                "safe": data["safe"],
                "moderate": data["moderate"],
                "ambitious": data["ambitious"],
            },
            "summary": data["summary"],
            "source": data["source"],
            "warnings": data["warnings"],
            "stats": data["stats"],
        }
    except PredictionValidationError as e:
        raise _bad_request(e)
    except Exception:
        return _server_error("predict colleges")


@router.post("/compare", summary="Compare 2-5 colleges")
def compare_colleges(request: CompareRequest, engine: PredictorEngine = Depends(get_engine)):
    try:
        context = ApplicantContext(
            category=request.category,
            home_state=request.home_state,
            scores=request.scores,
        )
        output = engine.compare(request.college_ids, context)
        data = output.model_dump(mode="json")
        return {
            "success": True,
            "comparison": data["rows"],
            "summary": data["summary"],
            "recommendations": data["recommendations"],
        }
    except PredictionValidationError as e:
        raise _bad_request(e)
    except Exception:
        return _server_error("compare colleges")


@router.post("/what-if", summary="What-if scenarios for different scores")
def what_if_scenarios(request: WhatIfRequest, engine: PredictorEngine = Depends(get_engine)):
    try:
        deadline = request.deadline_seconds or settings.SWEEP_DEADLINE_SECONDS
        output = engine.what_if(request.scenarios, deadline_seconds=deadline)
        data = output.model_dump(mode="json")
        return {"success": True, **data}
    except PredictionValidationError as e:
        raise _bad_request(e)
    except Exception:
        return _server_error("generate scenarios")


@router.post("/college/{college_id}", summary="College details with relevant cutoffs")
def college_details(
    college_id: str,
    context: Optional[ApplicantContext] = None,
    engine: PredictorEngine = Depends(get_engine),
):
    try:
        detail = engine.college_details(college_id, context or ApplicantContext())
        return {"success": True, "college": detail.model_dump(mode="json")}
    except InstitutionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception:
        return _server_error("get college details")


@router.get("/exams", summary="Exams available in the catalog")
def list_exams(track: Optional[str] = None, engine: PredictorEngine = Depends(get_engine)):
    if track:
        try:
            track = coerce_track(track).value
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "track": track, "exams": engine.available_exams(track)}


# =============================================================================
# HEALTH CHECK
# =============================================================================

@router.get("/health", summary="Predictor health check")
def health_check():
    """Check if the predictor is operational."""
    return {"status": "ok", "engine": "college-predictor", "ai_enabled": ai_predictor is not None}
