"""Data models for the sources module."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Source:
    """A news feed the aggregator polls.

    ``feed_url`` is unique across sources. Fetch bookkeeping
    (``error_count``, ``last_error`` and the fetch timestamps) is written
    only by the feed fetcher.
    """

    name: str
    feed_url: str
    id: int | None = None
    description: str = ""
    website_url: str = ""
    category: str = ""
    is_active: bool = True
    fetch_interval_minutes: int = 60
    error_count: int = 0
    last_error: str | None = None
    last_fetched_at: datetime | None = None
    last_successful_fetch_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    article_count: int | None = None
