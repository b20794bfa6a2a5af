"""
Prometheus metrics for the feed aggregation pipeline.

Tracks:
- Feed fetch outcomes and latency per source
- Article creation, duplicates and skipped entries
- Sync run duration
- Consecutive error count per source

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import Counter, Gauge, Histogram, start_http_server

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Feed fetches are network-bound; buckets stretch to the fetch timeout
FETCH_BUCKETS = (0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0)
SYNC_BUCKETS = (1.0, 5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0)


class MetricsCollector:
    """
    Prometheus metrics collector for feed aggregation.

    Usage:
        metrics = get_metrics()
        metrics.record_fetch("Krebs on Security", success=True, latency=1.2)
        metrics.record_entries(created=3, duplicates=1, skipped=0, errors=0)
    """

    def __init__(self):
        self.feed_fetches = Counter(
            "news_aggregator_feed_fetches_total",
            "Total feed fetch attempts",
            ["status"],  # success, failure
        )

        self.feed_fetch_latency = Histogram(
            "news_aggregator_feed_fetch_latency_seconds",
            "Time to fetch, parse and process one feed",
            buckets=FETCH_BUCKETS,
        )

        self.entries_processed = Counter(
            "news_aggregator_entries_processed_total",
            "Feed entries processed",
            ["outcome"],  # created, duplicate, skipped, error
        )

        self.sync_duration = Histogram(
            "news_aggregator_sync_duration_seconds",
            "Wall-clock duration of a full sync run",
            buckets=SYNC_BUCKETS,
        )

        self.source_error_count = Gauge(
            "news_aggregator_source_consecutive_errors",
            "Consecutive fetch failures per source",
            ["source"],
        )

        self._server_started = False

    def start_server(self, port: int | None = None) -> None:
        """Start the Prometheus exposition server (idempotent)."""
        if self._server_started:
            return
        port = port or get_settings().metrics_port
        start_http_server(port)
        self._server_started = True
        logger.info("Metrics server started on port %d", port)

    def record_fetch(self, source_name: str, success: bool, latency: float) -> None:
        """Record the outcome of a single feed fetch."""
        self.feed_fetches.labels(status="success" if success else "failure").inc()
        if latency > 0:
            self.feed_fetch_latency.observe(latency)

    def record_entries(
        self,
        created: int = 0,
        duplicates: int = 0,
        skipped: int = 0,
        errors: int = 0,
    ) -> None:
        """Record per-entry outcomes for one processed feed."""
        for outcome, count in (
            ("created", created),
            ("duplicate", duplicates),
            ("skipped", skipped),
            ("error", errors),
        ):
            if count:
                self.entries_processed.labels(outcome=outcome).inc(count)

    def set_source_errors(self, source_name: str, error_count: int) -> None:
        self.source_error_count.labels(source=source_name).set(error_count)

    def record_sync(self, duration: float) -> None:
        self.sync_duration.observe(duration)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
