"""
Request and response models for the news API.

Every response uses the same envelope: ``{"success": true, "data": ...}``
on success and ``{"success": false, "error": "..."}`` on failure.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.ingestion.schemas import FetchResult
from src.services.schemas import ArticlePage, NewsStats, SyncSummary
from src.sources.schemas import Source
from src.storage.schemas import Category


class ErrorResponse(BaseModel):
    """Response model for errors."""

    success: bool = False
    error: str = Field(..., description="Error message")


# Articles and stats


class ArticlesResponse(BaseModel):
    success: bool = True
    data: ArticlePage


class StatsResponse(BaseModel):
    success: bool = True
    data: NewsStats


# Sources and categories


class SourceItem(BaseModel):
    """A news source as exposed by the API."""

    id: int
    name: str
    feed_url: str
    description: str = ""
    website_url: str = ""
    category: str = ""
    is_active: bool = True
    fetch_interval_minutes: int
    error_count: int = 0
    last_error: str | None = None
    last_fetched_at: datetime | None = None
    last_successful_fetch_at: datetime | None = None
    article_count: int | None = Field(
        default=None,
        description="Approved articles from this source (only with include_stats)",
    )

    @classmethod
    def from_source(cls, source: Source) -> "SourceItem":
        return cls(
            id=source.id,
            name=source.name,
            feed_url=source.feed_url,
            description=source.description,
            website_url=source.website_url,
            category=source.category,
            is_active=source.is_active,
            fetch_interval_minutes=source.fetch_interval_minutes,
            error_count=source.error_count,
            last_error=source.last_error,
            last_fetched_at=source.last_fetched_at,
            last_successful_fetch_at=source.last_successful_fetch_at,
            article_count=source.article_count,
        )


class SourcesResponse(BaseModel):
    success: bool = True
    data: list[SourceItem] = Field(default_factory=list)


class CategoriesResponse(BaseModel):
    success: bool = True
    data: list[Category] = Field(default_factory=list)


# Sync


class SyncResultItem(BaseModel):
    """Outcome for one source in a sync run."""

    source: str
    source_id: int | None = None
    success: bool
    new_articles: int = 0
    total_items: int = 0
    error: str | None = None

    @classmethod
    def from_result(cls, result: FetchResult) -> "SyncResultItem":
        return cls(
            source=result.source.name,
            source_id=result.source.id,
            success=result.success,
            new_articles=result.new_article_count,
            total_items=result.item_count,
            error=result.error,
        )


class SyncSummaryData(BaseModel):
    total_sources: int
    successful_sources: int
    failed_sources: int
    total_new_articles: int
    total_items_processed: int
    processing_time_ms: int
    synced_at: datetime
    results: list[SyncResultItem] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: SyncSummary) -> "SyncSummaryData":
        return cls(
            total_sources=summary.total_sources,
            successful_sources=summary.successful_sources,
            failed_sources=summary.failed_sources,
            total_new_articles=summary.total_new_articles,
            total_items_processed=summary.total_items_processed,
            processing_time_ms=summary.processing_time_ms,
            synced_at=summary.synced_at,
            results=[SyncResultItem.from_result(r) for r in summary.results],
        )


class SyncResponse(BaseModel):
    success: bool = True
    data: SyncSummaryData


# Health


class ComponentHealth(BaseModel):
    """Health status of a single infrastructure component."""

    status: str = Field(..., description="healthy or unhealthy")
    latency_ms: float | None = Field(default=None, description="Check latency in milliseconds")
    details: dict[str, str] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Overall service status: healthy or unhealthy")
    components: dict[str, ComponentHealth] = Field(default_factory=dict)
    version: str
