"""
Dependency injection for FastAPI endpoints.
"""

from src.ingestion.feed_client import FeedClient
from src.services.aggregation_service import (
    NewsAggregationService,
    create_aggregation_service,
)
from src.sources.service import SourcesService
from src.storage.database import Database

# Global service instances (initialized on first request)
_database: Database | None = None
_feed_client: FeedClient | None = None
_aggregation_service: NewsAggregationService | None = None
_sources_service: SourcesService | None = None


async def get_database() -> Database:
    """
    Get database instance.

    Connects on first use. Raises StorageUnavailableError if the server
    cannot be reached; the next request tries again.
    """
    global _database

    if _database is None:
        database = Database()
        await database.connect()
        _database = database

    return _database


async def get_aggregation_service() -> NewsAggregationService:
    """Get the aggregation service, sharing one feed client across syncs."""
    global _aggregation_service, _feed_client

    if _aggregation_service is None:
        database = await get_database()
        if _feed_client is None:
            _feed_client = FeedClient()
        _aggregation_service = create_aggregation_service(database, client=_feed_client)

    return _aggregation_service


async def get_sources_service() -> SourcesService:
    global _sources_service

    if _sources_service is None:
        _sources_service = SourcesService(await get_database())

    return _sources_service


async def cleanup_dependencies() -> None:
    """Clean up global dependencies on shutdown."""
    global _database, _feed_client, _aggregation_service, _sources_service

    _aggregation_service = None
    _sources_service = None

    if _feed_client is not None:
        await _feed_client.close()
        _feed_client = None

    if _database is not None:
        await _database.close()
        _database = None
