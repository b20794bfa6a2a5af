"""Shared fixtures for sources tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest


@pytest.fixture
def mock_database() -> AsyncMock:
    """Mock Database instance matching the Database API."""
    db = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    db.fetchval = AsyncMock(return_value=None)
    db.fetchrow = AsyncMock(return_value=None)
    db.execute = AsyncMock(return_value="UPDATE 1")
    return db


@pytest.fixture
def sample_db_row() -> dict:
    """A dict mimicking an asyncpg Record for a source."""
    return {
        "id": 1,
        "name": "Krebs on Security",
        "feed_url": "https://krebsonsecurity.com/feed/",
        "description": "In-depth security news and investigation",
        "website_url": "https://krebsonsecurity.com",
        "category": "investigations",
        "is_active": True,
        "fetch_interval_minutes": 60,
        "error_count": 0,
        "last_error": None,
        "last_fetched_at": None,
        "last_successful_fetch_at": None,
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
    }
