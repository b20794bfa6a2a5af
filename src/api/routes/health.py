"""
Health check endpoint.
"""

import time

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.api import dependencies
from src.api.models import ComponentHealth, HealthResponse
from src.storage.database import StorageUnavailableError

router = APIRouter()
logger = structlog.get_logger(__name__)

VERSION = "0.1.0"


async def _check_database() -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    try:
        db = await dependencies.get_database()
        healthy = await db.health_check()
        details: dict[str, str] = {}
    except StorageUnavailableError as e:
        healthy = False
        details = {"error": str(e)}

    latency_ms = (time.perf_counter() - start) * 1000
    return ComponentHealth(
        status="healthy" if healthy else "unhealthy",
        latency_ms=round(latency_ms, 2),
        details=details,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns 503 when the database is unreachable.",
)
async def health_check():
    db_health = await _check_database()
    status = "healthy" if db_health.status == "healthy" else "unhealthy"

    body = HealthResponse(
        status=status,
        components={"database": db_health},
        version=VERSION,
    )
    if status != "healthy":
        logger.warning("Health check failed", components=body.model_dump()["components"])
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
    return body
