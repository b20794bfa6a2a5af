"""
Aggregate news statistics endpoint.
"""

from fastapi import APIRouter, Depends

from src.api.auth import verify_api_key
from src.api.dependencies import get_aggregation_service
from src.api.models import ErrorResponse, StatsResponse
from src.services.aggregation_service import NewsAggregationService

router = APIRouter()


@router.get(
    "/news/stats",
    response_model=StatsResponse,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Article counts",
    description="Total, recent (24h), featured, trending and breaking counts over approved articles.",
)
async def get_stats(
    api_key: str = Depends(verify_api_key),
    service: NewsAggregationService = Depends(get_aggregation_service),
) -> StatsResponse:
    return StatsResponse(data=await service.get_stats())
