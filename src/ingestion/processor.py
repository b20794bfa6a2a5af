"""
Feed entry processing.

Turns raw feedparser entries into stored Articles: field extraction,
required-field validation, (source_id, guid) dedup, content analysis,
excerpt and image selection, then insert with suggested tags.
"""

import calendar
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from src.analysis.service import ContentAnalyzer
from src.analysis.text import clean_html, entry_content, extract_image_url, generate_excerpt
from src.ingestion.schemas import EntryBatchResult, ProcessedEntry
from src.observability.metrics import MetricsCollector, get_metrics
from src.sources.schemas import Source
from src.storage.database import StorageUnavailableError
from src.storage.repository import ArticleRepository
from src.storage.schemas import Article, ArticleTag, ModerationStatus

logger = logging.getLogger(__name__)


def _parse_timestamp(entry: Mapping[str, Any]) -> datetime:
    """Published time, else updated time, else now. Always UTC."""
    for key in ("published_parsed", "updated_parsed"):
        parsed = entry.get(key)
        if parsed:
            try:
                return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError):
                continue
    return datetime.now(timezone.utc)


def _first_text(*candidates: Any) -> str:
    """First candidate that is non-blank once stripped, else an empty string."""
    for value in candidates:
        text = str(value or "").strip()
        if text:
            return text
    return ""


class ItemProcessor:
    """
    Normalizes and stores feed entries for one source at a time.

    The existence check before insert is a fast path only. The store's
    UNIQUE (source_id, guid) constraint decides races, and a lost race is
    reported as a duplicate.
    """

    def __init__(
        self,
        articles: ArticleRepository,
        analyzer: ContentAnalyzer | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self._articles = articles
        self._analyzer = analyzer or ContentAnalyzer()
        self._metrics = metrics or get_metrics()
        self._excerpt_length = self._analyzer.config.excerpt_length

    async def process_entry(
        self, entry: Mapping[str, Any], source: Source
    ) -> ProcessedEntry | None:
        """
        Process one feed entry.

        Returns:
            ProcessedEntry, or None when the entry lacks a title or URL
        """
        title = clean_html(entry.get("title") or "")
        raw_description = entry.get("summary") or entry.get("description") or ""
        raw_content = entry_content(entry)
        description = clean_html(raw_description)
        content = clean_html(raw_content)
        guid = _first_text(entry.get("id"), entry.get("guid"), entry.get("link"))
        original_url = _first_text(entry.get("link"), guid)
        author = clean_html(entry.get("author") or "")

        if not title or not original_url:
            logger.debug(f"Skipping entry from {source.name} with missing title or URL")
            return None

        existing = await self._articles.get_by_source_guid(source.id, guid)
        if existing is not None:
            return ProcessedEntry(article=existing, is_new=False, is_duplicate=True)

        analysis = self._analyzer.analyze(title, description, content)
        body, raw_body = (content, raw_content) if content else (description, raw_description)
        image_url = extract_image_url(entry)

        article = Article(
            source_id=source.id,
            guid=guid,
            title=title,
            description=description,
            content=body,
            excerpt=generate_excerpt(raw_body, self._excerpt_length),
            author=author,
            original_url=original_url,
            published_at=_parse_timestamp(entry),
            image_url=image_url,
            thumbnail_url=image_url,
            keywords=analysis.keywords,
            sentiment_score=analysis.sentiment_score,
            read_time_minutes=analysis.read_time_minutes,
            is_trending=analysis.is_trending,
            is_breaking=analysis.is_breaking,
            moderation_status=ModerationStatus.APPROVED,
        )
        tags = [
            ArticleTag(tag_name=t.tag, confidence_score=t.confidence)
            for t in analysis.suggested_tags
        ]

        stored, created = await self._articles.insert(article, tags)
        return ProcessedEntry(article=stored, is_new=created, is_duplicate=not created)

    async def process_entries(
        self, entries: Iterable[Mapping[str, Any]], source: Source
    ) -> EntryBatchResult:
        """
        Process a feed's entries in order.

        An unexpected error on one entry is logged and that entry skipped.
        StorageUnavailableError propagates: the whole fetch has failed.
        """
        result = EntryBatchResult()

        for entry in entries:
            try:
                processed = await self.process_entry(entry, source)
            except StorageUnavailableError:
                raise
            except Exception as e:
                result.errors += 1
                logger.error(f"Error processing entry from {source.name}: {e}", exc_info=True)
                continue

            if processed is None:
                result.skipped += 1
            else:
                result.entries.append(processed)

        self._metrics.record_entries(
            created=result.new_count,
            duplicates=result.duplicate_count,
            skipped=result.skipped,
            errors=result.errors,
        )
        return result
