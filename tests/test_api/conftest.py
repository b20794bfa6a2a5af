"""Shared fixtures for API tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api import dependencies
from src.api.app import create_app
from src.api.auth import verify_api_key
from src.api.dependencies import get_aggregation_service, get_sources_service
from src.services.schemas import ArticlePage, NewsStats, Pagination
from src.storage.schemas import Article


def make_article(article_id: int = 1, **kwargs) -> Article:
    """Helper to create a stored Article with sensible defaults."""
    return Article(
        id=article_id,
        source_id=kwargs.pop("source_id", 1),
        guid=kwargs.pop("guid", f"https://krebsonsecurity.com/?p={article_id}"),
        title=kwargs.pop("title", "Ransomware gang hits hospital"),
        original_url=kwargs.pop(
            "original_url", f"https://krebsonsecurity.com/2025/01/story-{article_id}/"
        ),
        published_at=kwargs.pop(
            "published_at", datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
        ),
        source_name=kwargs.pop("source_name", "Krebs on Security"),
        **kwargs,
    )


@pytest.fixture
def mock_aggregation_service() -> AsyncMock:
    """Mock NewsAggregationService with empty results."""
    service = AsyncMock()
    service.get_articles = AsyncMock(
        return_value=ArticlePage(
            articles=[],
            pagination=Pagination.from_offset(0, 20, 0),
        )
    )
    service.get_stats = AsyncMock(
        return_value=NewsStats(last_updated=datetime(2025, 1, 1, tzinfo=timezone.utc))
    )
    service.get_categories = AsyncMock(return_value=[])
    return service


@pytest.fixture
def mock_sources_service() -> AsyncMock:
    service = AsyncMock()
    service.list_sources = AsyncMock(return_value=[])
    return service


@pytest.fixture
def mock_db() -> MagicMock:
    db = MagicMock()
    db.health_check = AsyncMock(return_value=True)
    return db


@pytest.fixture
def app(mock_aggregation_service, mock_sources_service, mock_db, monkeypatch):
    """App with services mocked and API key auth bypassed."""
    application = create_app()
    application.dependency_overrides[verify_api_key] = lambda: "test-key"
    application.dependency_overrides[get_aggregation_service] = lambda: mock_aggregation_service
    application.dependency_overrides[get_sources_service] = lambda: mock_sources_service

    async def _get_database():
        return mock_db

    monkeypatch.setattr(dependencies, "get_database", _get_database)

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def article_factory():
    return make_article
