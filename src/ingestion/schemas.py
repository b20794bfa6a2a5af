"""
Result types for feed ingestion.

FetchResult is what the orchestrator collects per source; it is returned
for failures as well as successes and never carries an exception.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.sources.schemas import Source
from src.storage.schemas import Article


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass
class ProcessedEntry:
    """Outcome of processing one feed entry that passed validation."""

    article: Article
    is_new: bool
    is_duplicate: bool


@dataclass
class EntryBatchResult:
    """Per-entry outcomes for one feed."""

    entries: list[ProcessedEntry] = field(default_factory=list)
    skipped: int = 0
    errors: int = 0

    @property
    def new_count(self) -> int:
        return sum(1 for e in self.entries if e.is_new)

    @property
    def duplicate_count(self) -> int:
        return sum(1 for e in self.entries if e.is_duplicate)


@dataclass
class FetchResult:
    """
    Outcome of one source's fetch.

    Attributes:
        success: Feed retrieved, parsed and processed
        item_count: Entries in the feed, including skipped and duplicate ones
        new_article_count: Articles created by this fetch
        source: The source, with its post-fetch error state
        fetched_at: When the fetch finished
        error: Failure message, None on success
    """

    success: bool
    source: Source
    item_count: int = 0
    new_article_count: int = 0
    error: str | None = None
    fetched_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def failure(cls, source: Source, error: str) -> "FetchResult":
        return cls(success=False, source=source, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "item_count": self.item_count,
            "new_article_count": self.new_article_count,
            "error": self.error,
            "source": {
                "id": self.source.id,
                "name": self.source.name,
                "feed_url": self.source.feed_url,
                "error_count": self.source.error_count,
            },
            "fetched_at": self.fetched_at.isoformat(),
        }
