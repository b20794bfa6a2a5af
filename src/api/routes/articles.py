"""
Article listing endpoint with filtering, sorting and pagination.
"""

import time
from datetime import datetime

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from src.api.auth import verify_api_key
from src.api.dependencies import get_aggregation_service
from src.api.models import ArticlesResponse, ErrorResponse
from src.config.settings import get_settings
from src.services.aggregation_service import NewsAggregationService
from src.storage.schemas import ArticleQuery, ModerationStatus

logger = structlog.get_logger(__name__)
router = APIRouter()


def _parse_id_list(value: str | None, name: str) -> list[int]:
    """Parse a comma-separated id list, ignoring empty items."""
    if not value:
        return []
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{name} must be a comma-separated list of integer ids",
        )


def _validation_message(exc: ValueError) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(err["msg"].removeprefix("Value error, ") for err in exc.errors())
    return str(exc)


@router.get(
    "/news/articles",
    response_model=ArticlesResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="List news articles",
    description="Filter, sort and paginate articles. Only approved articles unless moderation_status is given.",
)
async def list_articles(
    categories: str | None = Query(default=None, description="Comma-separated category ids"),
    sources: str | None = Query(default=None, description="Comma-separated source ids"),
    limit: int | None = Query(default=None, ge=1, description="Page size"),
    offset: int = Query(default=0, ge=0),
    sort_by: str = Query(default="published_at"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    featured: bool | None = Query(default=None),
    trending: bool | None = Query(default=None),
    breaking: bool | None = Query(default=None),
    moderation_status: ModerationStatus = Query(default=ModerationStatus.APPROVED),
    search: str | None = Query(default=None, description="Case-insensitive title/description match"),
    api_key: str = Depends(verify_api_key),
    service: NewsAggregationService = Depends(get_aggregation_service),
) -> ArticlesResponse:
    start = time.perf_counter()

    try:
        query = ArticleQuery(
            category_ids=_parse_id_list(categories, "categories"),
            source_ids=_parse_id_list(sources, "sources"),
            limit=limit or get_settings().default_page_size,
            offset=offset,
            sort_by=sort_by,
            sort_order=sort_order,
            date_from=date_from,
            date_to=date_to,
            featured=featured,
            trending=trending,
            breaking=breaking,
            moderation_status=moderation_status,
            search=search,
        )
        page = await service.get_articles(query)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=_validation_message(e),
        )

    logger.debug(
        "Listed articles",
        returned=len(page.articles),
        total=page.pagination.total,
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return ArticlesResponse(data=page)
