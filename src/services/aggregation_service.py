"""
News aggregation service - batched feed sync plus article queries.

Sync:
- Active sources are loaded once per run, least recently fetched first
- Sources are fetched in fixed-size batches that run concurrently
- One source failing never affects the others in its batch
- A fixed pause separates batches to stay polite to feed providers

Queries:
- Filtered, sorted, offset-paginated article listing
- Aggregate counts over approved articles
"""

import asyncio
import time
import uuid
from datetime import datetime, timedelta, timezone

import structlog

from src.config.settings import Settings, get_settings
from src.ingestion.feed_client import FeedClient
from src.ingestion.fetcher import FeedFetcher
from src.ingestion.processor import ItemProcessor
from src.ingestion.schemas import FetchResult
from src.observability.logging import log_context
from src.observability.metrics import MetricsCollector, get_metrics
from src.sources.repository import SourcesRepository
from src.sources.schemas import Source
from src.storage.database import Database
from src.storage.repository import ArticleRepository
from src.storage.schemas import ArticleQuery, Category
from src.services.schemas import ArticlePage, NewsStats, Pagination, SyncSummary

logger = structlog.get_logger(__name__)


class NewsAggregationService:
    """
    Orchestrates feed sync across all sources and serves article queries.

    Not self-scheduling: an external trigger (cron calling the CLI or the
    sync endpoint) starts each run.

    Usage:
        service = create_aggregation_service(database)
        results = await service.sync_all_sources()
        page = await service.get_articles(ArticleQuery(breaking=True, limit=10))
    """

    def __init__(
        self,
        sources: SourcesRepository,
        articles: ArticleRepository,
        fetcher: FeedFetcher,
        settings: Settings | None = None,
        metrics: MetricsCollector | None = None,
    ):
        """
        Initialize aggregation service.

        Args:
            sources: Source repository
            articles: Article repository
            fetcher: Per-source feed fetcher
            settings: Batch size, delay and paging limits (or global settings)
            metrics: Metrics collector (or global collector)
        """
        settings = settings or get_settings()

        self._sources = sources
        self._articles = articles
        self._fetcher = fetcher
        self._metrics = metrics or get_metrics()

        self._batch_size = settings.sync_batch_size
        self._batch_delay = settings.sync_batch_delay_seconds
        self._max_page_size = settings.max_page_size
        self._recent_window = timedelta(hours=settings.recent_window_hours)

    # ── Sync ────────────────────────────────────────────────────

    async def sync_all_sources(self) -> list[FetchResult]:
        """
        Fetch every active source once.

        Returns one FetchResult per source, successes and failures mixed.

        Raises:
            StorageUnavailableError: If the source list cannot be loaded
        """
        sources = await self._sources.get_active_for_sync()
        logger.info(
            "Starting feed sync",
            sources=len(sources),
            batch_size=self._batch_size,
        )

        results: list[FetchResult] = []
        for start in range(0, len(sources), self._batch_size):
            batch = sources[start:start + self._batch_size]
            results.extend(await self._fetch_batch(batch))

            if start + self._batch_size < len(sources):
                await asyncio.sleep(self._batch_delay)

        return results

    async def _fetch_batch(self, batch: list[Source]) -> list[FetchResult]:
        """Fetch a batch concurrently, converting raised errors into failures."""
        outcomes = await asyncio.gather(
            *(self._fetcher.fetch_feed(source) for source in batch),
            return_exceptions=True,
        )

        results: list[FetchResult] = []
        for source, outcome in zip(batch, outcomes):
            if isinstance(outcome, FetchResult):
                results.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                raise outcome

            message = str(outcome) or type(outcome).__name__
            logger.error(
                "Feed fetch raised",
                source=source.name,
                source_id=source.id,
                error=message,
            )
            results.append(FetchResult.failure(source, message))

        return results

    def summarize(self, results: list[FetchResult], duration_seconds: float) -> SyncSummary:
        """Roll per-source results up into run totals."""
        successful = sum(1 for r in results if r.success)
        return SyncSummary(
            total_sources=len(results),
            successful_sources=successful,
            failed_sources=len(results) - successful,
            total_new_articles=sum(r.new_article_count for r in results),
            total_items_processed=sum(r.item_count for r in results),
            processing_time_ms=int(duration_seconds * 1000),
            synced_at=datetime.now(timezone.utc),
            results=results,
        )

    async def run_sync(self) -> SyncSummary:
        """Sync all sources and return the summary, recording run metrics."""
        with log_context(sync_id=uuid.uuid4().hex[:12]):
            start = time.monotonic()
            results = await self.sync_all_sources()
            duration = time.monotonic() - start

            self._metrics.record_sync(duration)
            summary = self.summarize(results, duration)

            logger.info(
                "Feed sync completed",
                total_sources=summary.total_sources,
                successful=summary.successful_sources,
                failed=summary.failed_sources,
                new_articles=summary.total_new_articles,
                processing_time_ms=summary.processing_time_ms,
            )
        return summary

    # ── Queries ─────────────────────────────────────────────────

    async def get_articles(self, query: ArticleQuery | None = None) -> ArticlePage:
        """
        List articles matching the query.

        Raises:
            ValueError: If the page size exceeds the configured maximum
        """
        query = query or ArticleQuery()
        if query.limit > self._max_page_size:
            raise ValueError(
                f"limit must be at most {self._max_page_size}, got {query.limit}"
            )

        articles, total = await asyncio.gather(
            self._articles.list_articles(query),
            self._articles.count_articles(query),
        )

        return ArticlePage(
            articles=articles,
            pagination=Pagination.from_offset(total, query.limit, query.offset),
        )

    async def get_stats(self) -> NewsStats:
        """Counts over approved articles, queried concurrently."""
        now = datetime.now(timezone.utc)
        approved = ArticleQuery()

        total, recent, featured, trending, breaking = await asyncio.gather(
            self._articles.count_articles(approved),
            self._articles.count_articles(approved, created_since=now - self._recent_window),
            self._articles.count_articles(ArticleQuery(featured=True)),
            self._articles.count_articles(ArticleQuery(trending=True)),
            self._articles.count_articles(ArticleQuery(breaking=True)),
        )

        return NewsStats(
            total_articles=total,
            recent_articles=recent,
            featured_articles=featured,
            trending_articles=trending,
            breaking_news=breaking,
            last_updated=now,
        )

    async def get_categories(self, include_stats: bool = False) -> list[Category]:
        """Active categories, optionally with approved article counts."""
        return await self._articles.list_categories(include_stats=include_stats)


def create_aggregation_service(
    database: Database,
    client: FeedClient | None = None,
    settings: Settings | None = None,
) -> NewsAggregationService:
    """Wire repositories, processor and fetcher around one database."""
    sources = SourcesRepository(database)
    articles = ArticleRepository(database)
    processor = ItemProcessor(articles)
    fetcher = FeedFetcher(sources, processor, client or FeedClient())
    return NewsAggregationService(sources, articles, fetcher, settings=settings)
