"""
news-aggregator command line.

    news-aggregator init-db        create tables, seed sources when empty
    news-aggregator seed-sources   upsert the feed list from JSON
    news-aggregator sync           fetch every active source once (cron entry point)
    news-aggregator stats          article counts
    news-aggregator health         database reachability
    news-aggregator serve          run the HTTP API

Each database-backed command opens its own pool and closes it on exit.
An unreachable database exits with status 1.
"""

import asyncio
import json
import sys
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn, TypeVar

import click

from src.config.settings import get_settings
from src.observability.logging import setup_logging
from src.observability.metrics import get_metrics
from src.storage.database import StorageUnavailableError

if TYPE_CHECKING:
    from src.storage.database import Database

T = TypeVar("T")

RULE = "=" * 40


def _fail(message: str) -> NoReturn:
    click.echo(click.style(message, fg="red"), err=True)
    sys.exit(1)


@asynccontextmanager
async def _connected() -> AsyncIterator["Database"]:
    from src.storage.database import Database

    database = Database()
    await database.connect()
    try:
        yield database
    finally:
        await database.close()


def _run_with_database(work: Callable[..., Awaitable[T]]) -> T:
    """Run ``work(database)`` on a fresh pool; storage outages exit 1."""

    async def runner() -> T:
        async with _connected() as database:
            return await work(database)

    try:
        return asyncio.run(runner())
    except StorageUnavailableError as e:
        _fail(str(e))


@click.group()
@click.option("--debug", is_flag=True, help="Log at DEBUG regardless of LOG_LEVEL")
def main(debug: bool) -> None:
    """Cybersecurity news aggregator: RSS sync, storage and API."""
    setup_logging("DEBUG" if debug else None)


@main.command("init-db")
@click.option("--seed/--no-seed", default=True, help="Seed sources if the table is empty")
def init_db(seed: bool) -> None:
    """Create news tables (idempotent)."""
    from src.sources.repository import SourcesRepository
    from src.sources.service import SourcesService
    from src.storage.repository import ArticleRepository

    async def work(database) -> int:
        # news_articles has a foreign key to news_sources
        await SourcesRepository(database).create_table()
        await ArticleRepository(database).create_tables()
        click.echo("Database initialized successfully")
        return await SourcesService(database).ensure_seeded() if seed else 0

    seeded = _run_with_database(work)
    if seeded:
        click.echo(f"Seeded {seeded} sources")


@main.command("seed-sources")
@click.option(
    "--file",
    "path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Seed JSON (defaults to SOURCES_SEED_FILE, then the bundled list)",
)
def seed_sources(path: Path | None) -> None:
    """Upsert sources from JSON, matched by feed URL."""
    from src.sources.service import SourcesService

    count = _run_with_database(lambda database: SourcesService(database).seed_from_json(path))
    click.echo(f"Upserted {count} sources")


def _print_sync_summary(summary) -> None:
    click.echo("\nSync Summary")
    click.echo(RULE)
    click.echo(f"  Sources:        {summary.successful_sources}/{summary.total_sources} succeeded")
    click.echo(f"  Items seen:     {summary.total_items_processed}")
    click.echo(f"  New articles:   {summary.total_new_articles}")
    click.echo(f"  Duration:       {summary.processing_time_ms}ms")

    failures = [r for r in summary.results if not r.success]
    if not failures:
        return
    click.echo("\n  Failed sources:")
    for result in failures:
        line = (
            f"    ✗ {result.source.name} "
            f"({result.source.error_count} consecutive): {result.error}"
        )
        click.echo(click.style(line, fg="red"))


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
@click.option("--metrics/--no-metrics", default=False, help="Expose Prometheus metrics while running")
def sync(as_json: bool, metrics: bool) -> None:
    """Fetch every active source once.

    Meant for cron or a systemd timer. Per-source failures are listed in
    the summary and do not change the exit status; only an unreachable
    database does.
    """
    from src.ingestion.feed_client import FeedClient
    from src.services.aggregation_service import create_aggregation_service

    if metrics:
        get_metrics().start_server()

    async def work(database):
        async with FeedClient() as client:
            return await create_aggregation_service(database, client=client).run_sync()

    summary = _run_with_database(work)
    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
    else:
        _print_sync_summary(summary)


@main.command()
def stats() -> None:
    """Counts over approved articles."""
    from src.services.aggregation_service import create_aggregation_service

    counts = _run_with_database(lambda database: create_aggregation_service(database).get_stats())

    click.echo("\nNews Statistics")
    click.echo(RULE)
    for label, value in (
        ("Total articles:", counts.total_articles),
        ("Last 24 hours:", counts.recent_articles),
        ("Featured:", counts.featured_articles),
        ("Trending:", counts.trending_articles),
        ("Breaking:", counts.breaking_news),
    ):
        click.echo(f"  {label:<18}{value}")


@main.command()
def health() -> None:
    """Check that the database answers a trivial query."""

    async def probe() -> bool:
        try:
            async with _connected() as database:
                return await database.health_check()
        except StorageUnavailableError as e:
            click.echo(click.style(f"  ✗ postgres: {e}", fg="red"))
            return False

    click.echo("\nHealth Check Results:")
    click.echo("-" * 40)

    if asyncio.run(probe()):
        click.echo(click.style("  ✓ postgres: True", fg="green"))
        click.echo(click.style("All core services healthy!", fg="green"))
        sys.exit(0)

    click.echo(click.style("Some services unhealthy!", fg="red"))
    sys.exit(1)


@main.command()
@click.option("--host", default=None, help="Bind address (default API_HOST)")
@click.option("--port", default=None, type=int, help="Bind port (default API_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
@click.option("--metrics-port", default=None, type=int, help="Prometheus port (default METRICS_PORT)")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Run the news API under uvicorn."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    get_metrics().start_server(port=metrics_port)

    click.echo(f"News API on {host}:{port} (docs at /docs)")
    click.echo(f"Prometheus metrics on :{metrics_port}/metrics")

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
