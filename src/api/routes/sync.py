"""
Sync trigger endpoint for external schedulers.
"""

import structlog
from fastapi import APIRouter, Depends

from src.api.auth import verify_cron_secret
from src.api.dependencies import get_aggregation_service
from src.api.models import ErrorResponse, SyncResponse, SyncSummaryData
from src.services.aggregation_service import NewsAggregationService

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/news/sync",
    response_model=SyncResponse,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Run a feed sync",
    description="Fetch every active source once. Requires `Authorization: Bearer <CRON_SECRET>` when CRON_SECRET is set.",
)
async def run_sync(
    _: None = Depends(verify_cron_secret),
    service: NewsAggregationService = Depends(get_aggregation_service),
) -> SyncResponse:
    logger.info("Sync triggered via API")
    summary = await service.run_sync()
    return SyncResponse(data=SyncSummaryData.from_summary(summary))


@router.get("/news/sync", summary="Describe the sync endpoint")
async def describe_sync() -> dict:
    return {
        "message": "News sync endpoint. Use POST to trigger synchronization.",
        "usage": {
            "method": "POST",
            "headers": {"Authorization": "Bearer <CRON_SECRET> (required when CRON_SECRET is set)"},
        },
        "endpoints": {
            "sync": "POST /news/sync",
            "articles": "GET /news/articles",
            "stats": "GET /news/stats",
        },
    }
