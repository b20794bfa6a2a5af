"""
News source and category listing endpoints.
"""

from fastapi import APIRouter, Depends, Query

from src.api.auth import verify_api_key
from src.api.dependencies import get_aggregation_service, get_sources_service
from src.api.models import CategoriesResponse, ErrorResponse, SourceItem, SourcesResponse
from src.services.aggregation_service import NewsAggregationService
from src.sources.service import SourcesService

router = APIRouter()


@router.get(
    "/news/sources",
    response_model=SourcesResponse,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="List active news sources",
)
async def list_sources(
    category: str | None = Query(default=None, description="Filter by source category"),
    include_stats: bool = Query(default=False, description="Include approved article counts"),
    api_key: str = Depends(verify_api_key),
    service: SourcesService = Depends(get_sources_service),
) -> SourcesResponse:
    sources = await service.list_sources(category=category, include_stats=include_stats)
    return SourcesResponse(data=[SourceItem.from_source(s) for s in sources])


@router.get(
    "/news/categories",
    response_model=CategoriesResponse,
    responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="List active categories",
)
async def list_categories(
    include_stats: bool = Query(default=False, description="Include approved article counts"),
    api_key: str = Depends(verify_api_key),
    service: NewsAggregationService = Depends(get_aggregation_service),
) -> CategoriesResponse:
    return CategoriesResponse(data=await service.get_categories(include_stats=include_stats))
