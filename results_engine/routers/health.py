"""
Health Check Router - Assessment Results Engine
results_engine/routers/health.py

Reports service status, version and Redis reachability.
"""
from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter
from pydantic import BaseModel

from results_engine.config import settings
from results_engine.services.cache import get_cache

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    dependencies: Dict[str, str]


def check_redis() -> str:
    """Redis is optional: results are served without it."""
    if not settings.CACHE_ENABLED:
        return "disabled"
    return "healthy" if get_cache() is not None else "unavailable"


@router.get("/health", response_model=HealthResponse, summary="Service health")
def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        dependencies={"redis": check_redis()},
    )
