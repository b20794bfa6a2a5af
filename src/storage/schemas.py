"""
Article schema for the news aggregation pipeline.

Articles are written once by the item processor and read by the query
layer. Engagement counters, featured flag and category assignment belong
to external collaborators and are only ever read here.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class ModerationStatus(str, Enum):
    """Approval gate on articles. Ingestion always writes APPROVED."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ArticleTag(BaseModel):
    """Suggested tag attached to an article at creation time."""

    article_id: int | None = None
    tag_name: str = Field(..., min_length=1)
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    created_at: datetime | None = None


class Article(BaseModel):
    """A normalized news item derived from exactly one feed entry."""

    # Identity
    id: int | None = Field(default=None, description="Database id (set on insert)")
    source_id: int = Field(..., description="Owning news source")
    guid: str = Field(..., min_length=1, description="Source-scoped dedup key")
    category_id: int | None = None

    # Content
    title: str = Field(..., min_length=1)
    description: str = ""
    content: str = ""
    excerpt: str = ""
    author: str = ""
    original_url: str = Field(..., min_length=1)
    published_at: datetime = Field(default_factory=_utc_now)
    image_url: str | None = None
    thumbnail_url: str | None = None

    # Content analysis
    keywords: list[str] = Field(default_factory=list)
    sentiment_score: float = Field(default=0.0, ge=-1.0, le=1.0)
    read_time_minutes: int = Field(default=1, ge=1)
    is_trending: bool = False
    is_breaking: bool = False

    # Owned by external collaborators
    is_featured: bool = False
    view_count: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    share_count: int = Field(default=0, ge=0)
    moderation_status: ModerationStatus = ModerationStatus.APPROVED

    created_at: datetime | None = None
    updated_at: datetime | None = None

    # Joined on read
    source_name: str | None = None
    category_name: str | None = None
    tags: list[ArticleTag] = Field(default_factory=list)

    @field_validator("published_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps are assumed to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# Every scalar column of news_articles. Interpolated into ORDER BY.
SORTABLE_COLUMNS = frozenset({
    "id",
    "source_id",
    "category_id",
    "title",
    "description",
    "content",
    "excerpt",
    "author",
    "original_url",
    "guid",
    "published_at",
    "image_url",
    "thumbnail_url",
    "sentiment_score",
    "read_time_minutes",
    "view_count",
    "like_count",
    "share_count",
    "is_featured",
    "is_trending",
    "is_breaking",
    "moderation_status",
    "created_at",
    "updated_at",
})


class ArticleQuery(BaseModel):
    """Filter, sort and pagination options for listing articles."""

    category_ids: list[int] = Field(default_factory=list)
    source_ids: list[int] = Field(default_factory=list)
    date_from: datetime | None = None
    date_to: datetime | None = None
    featured: bool | None = None
    trending: bool | None = None
    breaking: bool | None = None
    moderation_status: ModerationStatus = ModerationStatus.APPROVED
    search: str | None = None

    sort_by: str = "published_at"
    sort_order: Literal["asc", "desc"] = "desc"
    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)

    @field_validator("sort_by")
    @classmethod
    def validate_sort_column(cls, v: str) -> str:
        if v not in SORTABLE_COLUMNS:
            raise ValueError(
                f"Cannot sort by '{v}'. Allowed: {', '.join(sorted(SORTABLE_COLUMNS))}"
            )
        return v

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None


class Category(BaseModel):
    """Editorial category. Assigned to articles by an external collaborator."""

    id: int
    name: str
    slug: str
    description: str = ""
    sort_order: int = 0
    is_active: bool = True
    article_count: int | None = None
