"""Shared fixtures for storage tests."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_connection() -> AsyncMock:
    """Connection yielded by Database.transaction()."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.executemany = AsyncMock()
    return conn


@pytest.fixture
def mock_database(mock_connection: AsyncMock) -> MagicMock:
    """Mock Database whose transaction() yields mock_connection."""

    @asynccontextmanager
    async def transaction():
        yield mock_connection

    db = MagicMock()
    db.transaction = transaction
    db.execute = AsyncMock(return_value="CREATE TABLE")
    db.fetch = AsyncMock(return_value=[])
    db.fetchrow = AsyncMock(return_value=None)
    db.fetchval = AsyncMock(return_value=None)
    return db


@pytest.fixture
def article_row() -> dict:
    """A dict mimicking an asyncpg Record from news_articles."""
    return {
        "id": 7,
        "source_id": 1,
        "category_id": None,
        "title": "Ransomware gang hits hospital",
        "description": "Systems were encrypted overnight.",
        "content": "Systems were encrypted overnight.",
        "excerpt": "Systems were encrypted overnight.",
        "author": "Brian Krebs",
        "original_url": "https://krebsonsecurity.com/2025/01/ransomware/",
        "guid": "https://krebsonsecurity.com/?p=1",
        "published_at": datetime(2025, 1, 1, 12, tzinfo=timezone.utc),
        "image_url": None,
        "thumbnail_url": None,
        "keywords": ["ransomware", "hospital"],
        "sentiment_score": -0.1,
        "read_time_minutes": 1,
        "view_count": 0,
        "like_count": 0,
        "share_count": 0,
        "is_featured": False,
        "is_trending": False,
        "is_breaking": False,
        "moderation_status": "approved",
        "created_at": datetime(2025, 1, 1, 12, 5, tzinfo=timezone.utc),
        "updated_at": datetime(2025, 1, 1, 12, 5, tzinfo=timezone.utc),
    }
