"""Response shapes for the aggregation service."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.ingestion.schemas import FetchResult
from src.storage.schemas import Article


class Pagination(BaseModel):
    """Offset/limit pagination metadata."""

    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_offset(cls, total: int, limit: int, offset: int) -> "Pagination":
        page = offset // limit + 1
        total_pages = math.ceil(total / limit)
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class ArticlePage(BaseModel):
    """One page of articles plus pagination metadata."""

    articles: list[Article] = Field(default_factory=list)
    pagination: Pagination


class NewsStats(BaseModel):
    """Aggregate counts over approved articles."""

    total_articles: int = 0
    recent_articles: int = 0
    featured_articles: int = 0
    trending_articles: int = 0
    breaking_news: int = 0
    last_updated: datetime


@dataclass
class SyncSummary:
    """Roll-up of one sync run."""

    total_sources: int
    successful_sources: int
    failed_sources: int
    total_new_articles: int
    total_items_processed: int
    processing_time_ms: int
    synced_at: datetime
    results: list[FetchResult] = field(default_factory=list)

    def to_dict(self, include_results: bool = True) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "total_sources": self.total_sources,
            "successful_sources": self.successful_sources,
            "failed_sources": self.failed_sources,
            "total_new_articles": self.total_new_articles,
            "total_items_processed": self.total_items_processed,
            "processing_time_ms": self.processing_time_ms,
            "synced_at": self.synced_at.isoformat(),
        }
        if include_results:
            data["results"] = [r.to_dict() for r in self.results]
        return data
