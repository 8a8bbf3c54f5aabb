"""
Results Router - Assessment Results Engine
results_engine/routers/results.py

Computes and serves assessment results snapshots.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from fastapi.exceptions import HTTPException
from pydantic import BaseModel, Field

from results_engine.config import settings
from results_engine.core.dependencies import get_results_service
from results_engine.core.exceptions import (
    DataSourceException,
    EntityNotFoundException,
    IncompleteDataError,
    ScoreValidationError,
    TemplateReferenceError,
)
from results_engine.services.results_service import ResultsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.API_V1_PREFIX}/assessments", tags=["Results"])


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error occurrence timestamp")


#  Exception Helpers

def raise_error(status_code: int, error_code: str, message: str, details: Optional[dict] = None):
    raise HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error_code=error_code,
            message=message,
            details=details,
            timestamp=datetime.now(timezone.utc),
        ).model_dump(mode="json"),
    )


def raise_engine_error(exc: Exception):
    """Translate engine and data-source failures into HTTP errors."""
    if isinstance(exc, IncompleteDataError):
        raise_error(
            status.HTTP_409_CONFLICT,
            "RESULTS_NOT_AVAILABLE",
            "Results not available yet",
            {"assessment_id": exc.assessment_id, "reason": exc.message},
        )
    if isinstance(exc, ScoreValidationError):
        raise_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "RESULTS_VALIDATION_FAILED",
            exc.message,
            exc.details or None,
        )
    if isinstance(exc, TemplateReferenceError):
        raise_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "RESULTS_REFERENCE_ERROR",
            exc.message,
            {"competency_id": exc.competency_id, "question_id": exc.question_id},
        )
    if isinstance(exc, EntityNotFoundException):
        raise_error(
            status.HTTP_404_NOT_FOUND,
            f"{exc.entity_type.upper()}_NOT_FOUND",
            f"{exc.entity_type} not found",
            {"id": exc.entity_id},
        )
    if isinstance(exc, DataSourceException):
        raise_error(status.HTTP_502_BAD_GATEWAY, "DATA_SOURCE_ERROR", exc.message)
    raise exc


_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    404: {"model": ErrorResponse, "description": "Assessment or template not found"},
    409: {"model": ErrorResponse, "description": "No completed responses yet"},
    422: {"model": ErrorResponse, "description": "Rating out of scale or unknown template reference"},
    502: {"model": ErrorResponse, "description": "Data source failure"},
}


#  Routes

@router.post(
    "/{assessment_id}/results",
    status_code=status.HTTP_201_CREATED,
    summary="Compute a new results snapshot",
    responses=_ERROR_RESPONSES,
)
def compute_results(
    assessment_id: str,
    service: ResultsService = Depends(get_results_service),
) -> Dict[str, Any]:
    try:
        results = service.compute(assessment_id)
    except (IncompleteDataError, ScoreValidationError, TemplateReferenceError, DataSourceException) as e:
        logger.warning(f"Results computation failed for {assessment_id}: {e}")
        raise_engine_error(e)
    return results.to_wire()


@router.get(
    "/{assessment_id}/results",
    summary="Latest results snapshot (cached, stored or freshly computed)",
    responses=_ERROR_RESPONSES,
)
def get_results(
    assessment_id: str,
    service: ResultsService = Depends(get_results_service),
) -> Dict[str, Any]:
    try:
        results = service.get_results(assessment_id)
    except (IncompleteDataError, ScoreValidationError, TemplateReferenceError, DataSourceException) as e:
        logger.warning(f"Results lookup failed for {assessment_id}: {e}")
        raise_engine_error(e)
    return results.to_wire()
