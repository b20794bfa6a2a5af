"""
Per-source feed fetch with error bookkeeping.

fetch_feed never raises for a single source's failure. The source row
records the attempt before the download and then either a success
(error counter reset) or a failure (error counter +1, message stored).
"""

import dataclasses
import logging
import time
from datetime import datetime, timezone

import asyncpg

from src.ingestion.feed_client import FeedClient, FeedFetchError
from src.ingestion.processor import ItemProcessor
from src.ingestion.schemas import FetchResult
from src.observability.metrics import MetricsCollector, get_metrics
from src.sources.repository import SourcesRepository
from src.sources.schemas import Source
from src.storage.database import StorageUnavailableError

logger = logging.getLogger(__name__)


class FeedFetcher:
    """
    Fetches one source's feed and hands its entries to the processor.

    No retries happen here; the next sync run is the retry.
    """

    def __init__(
        self,
        sources: SourcesRepository,
        processor: ItemProcessor,
        client: FeedClient,
        metrics: MetricsCollector | None = None,
    ):
        self._sources = sources
        self._processor = processor
        self._client = client
        self._metrics = metrics or get_metrics()

    async def fetch_feed(self, source: Source) -> FetchResult:
        """
        Fetch, parse and process a single source.

        Returns:
            FetchResult with success=False on any failure
        """
        start = time.monotonic()
        attempted_at = datetime.now(timezone.utc)

        try:
            await self._sources.mark_fetch_attempt(source.id, attempted_at)
            logger.info(f"Fetching feed from {source.name}: {source.feed_url}")

            entries = await self._client.fetch(source.feed_url)
            batch = await self._processor.process_entries(entries, source)

            succeeded_at = datetime.now(timezone.utc)
            await self._sources.mark_fetch_success(source.id, succeeded_at)
        except Exception as e:
            return await self._fail(source, e, attempted_at, time.monotonic() - start)

        elapsed = time.monotonic() - start
        self._metrics.record_fetch(source.name, success=True, latency=elapsed)
        self._metrics.set_source_errors(source.name, 0)

        logger.info(
            f"Processed {len(entries)} items from {source.name} in {elapsed * 1000:.0f}ms. "
            f"{batch.new_count} new articles."
        )

        return FetchResult(
            success=True,
            source=dataclasses.replace(
                source,
                error_count=0,
                last_error=None,
                last_fetched_at=attempted_at,
                last_successful_fetch_at=succeeded_at,
            ),
            item_count=len(entries),
            new_article_count=batch.new_count,
        )

    async def _fail(
        self,
        source: Source,
        exc: Exception,
        attempted_at: datetime,
        elapsed: float,
    ) -> FetchResult:
        message = str(exc) or type(exc).__name__

        if isinstance(exc, (FeedFetchError, StorageUnavailableError)):
            logger.warning(f"Error fetching feed from {source.name}: {message}")
        else:
            logger.error(f"Unexpected error fetching {source.name}: {message}", exc_info=exc)

        error_count = source.error_count + 1
        try:
            error_count = await self._sources.mark_fetch_failure(source.id, message)
        except (StorageUnavailableError, asyncpg.PostgresError) as e:
            logger.error(f"Could not record fetch failure for {source.name}: {e}")

        self._metrics.record_fetch(source.name, success=False, latency=elapsed)
        self._metrics.set_source_errors(source.name, error_count)

        return FetchResult.failure(
            dataclasses.replace(
                source,
                error_count=error_count,
                last_error=message,
                last_fetched_at=attempted_at,
            ),
            message,
        )
