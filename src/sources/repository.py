"""Database repository for the news_sources table."""

import logging
from datetime import datetime, timezone

from src.sources.schemas import Source
from src.storage.database import Database

logger = logging.getLogger(__name__)

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS news_sources (
    id                       BIGSERIAL PRIMARY KEY,
    name                     TEXT NOT NULL,
    feed_url                 TEXT NOT NULL UNIQUE,
    description              TEXT NOT NULL DEFAULT '',
    website_url              TEXT NOT NULL DEFAULT '',
    category                 TEXT NOT NULL DEFAULT '',
    is_active                BOOLEAN NOT NULL DEFAULT TRUE,
    fetch_interval_minutes   INTEGER NOT NULL DEFAULT 60,
    error_count              INTEGER NOT NULL DEFAULT 0 CHECK (error_count >= 0),
    last_error               TEXT,
    last_fetched_at          TIMESTAMPTZ,
    last_successful_fetch_at TIMESTAMPTZ,
    created_at               TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at               TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_news_sources_active_fetched
    ON news_sources(last_fetched_at ASC NULLS FIRST) WHERE is_active = TRUE;
CREATE INDEX IF NOT EXISTS idx_news_sources_category
    ON news_sources(category);
"""

_UPSERT_COLUMNS = """
    name, feed_url, description, website_url, category, is_active,
    fetch_interval_minutes
"""

_UPSERT_CONFLICT = """
ON CONFLICT (feed_url) DO UPDATE SET
    name = EXCLUDED.name,
    description = EXCLUDED.description,
    website_url = EXCLUDED.website_url,
    category = EXCLUDED.category,
    is_active = EXCLUDED.is_active,
    fetch_interval_minutes = EXCLUDED.fetch_interval_minutes,
    updated_at = NOW()
"""

_BULK_UPSERT_SQL = f"""
INSERT INTO news_sources ({_UPSERT_COLUMNS})
SELECT * FROM unnest(
    $1::text[], $2::text[], $3::text[], $4::text[], $5::text[],
    $6::boolean[], $7::integer[]
)
{_UPSERT_CONFLICT}
"""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _record_to_source(record) -> Source:
    """Convert an asyncpg Record to a Source dataclass."""
    return Source(
        id=record["id"],
        name=record["name"],
        feed_url=record["feed_url"],
        description=record["description"],
        website_url=record["website_url"],
        category=record["category"],
        is_active=record["is_active"],
        fetch_interval_minutes=record["fetch_interval_minutes"],
        error_count=record["error_count"],
        last_error=record["last_error"],
        last_fetched_at=record["last_fetched_at"],
        last_successful_fetch_at=record["last_successful_fetch_at"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
        article_count=record.get("article_count"),
    )


class SourcesRepository:
    """CRUD and fetch bookkeeping for the news_sources table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def create_table(self) -> None:
        """Create the news_sources table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("News sources table ensured")

    async def bulk_upsert(self, sources: list[Source]) -> int:
        """Insert or update multiple sources in one statement.

        Returns the number of sources processed.
        """
        if not sources:
            return 0

        await self._db.execute(
            _BULK_UPSERT_SQL,
            [s.name for s in sources],
            [s.feed_url for s in sources],
            [s.description for s in sources],
            [s.website_url for s in sources],
            [s.category for s in sources],
            [s.is_active for s in sources],
            [s.fetch_interval_minutes for s in sources],
        )
        logger.info("Bulk upserted %d sources", len(sources))
        return len(sources)

    async def get_active_for_sync(self) -> list[Source]:
        """Active sources, least recently fetched first (never fetched first of all)."""
        rows = await self._db.fetch(
            """
            SELECT * FROM news_sources
            WHERE is_active = TRUE
            ORDER BY last_fetched_at ASC NULLS FIRST, id ASC
            """
        )
        return [_record_to_source(r) for r in rows]

    async def mark_fetch_attempt(
        self, source_id: int, at: datetime | None = None
    ) -> None:
        """Stamp last_fetched_at before a fetch starts."""
        await self._db.execute(
            """
            UPDATE news_sources
            SET last_fetched_at = $2, updated_at = NOW()
            WHERE id = $1
            """,
            source_id,
            at or _utc_now(),
        )

    async def mark_fetch_success(
        self, source_id: int, at: datetime | None = None
    ) -> None:
        """Reset the error counter and advance last_successful_fetch_at."""
        await self._db.execute(
            """
            UPDATE news_sources
            SET last_successful_fetch_at = GREATEST(
                    COALESCE(last_successful_fetch_at, $2), $2
                ),
                error_count = 0,
                last_error = NULL,
                updated_at = NOW()
            WHERE id = $1
            """,
            source_id,
            at or _utc_now(),
        )

    async def mark_fetch_failure(self, source_id: int, error: str) -> int:
        """Increment the error counter and store the message.

        Returns the new consecutive error count (0 if the source vanished).
        """
        count = await self._db.fetchval(
            """
            UPDATE news_sources
            SET error_count = error_count + 1,
                last_error = $2,
                updated_at = NOW()
            WHERE id = $1
            RETURNING error_count
            """,
            source_id,
            error,
        )
        return count or 0

    async def list_active(
        self,
        category: str | None = None,
        include_stats: bool = False,
    ) -> list[Source]:
        """Active sources ordered by name, optionally with approved article counts."""
        conditions: list[str] = ["s.is_active = TRUE"]
        params: list = []
        idx = 1

        if category:
            conditions.append(f"s.category = ${idx}")
            params.append(category)
            idx += 1

        count_column = ""
        if include_stats:
            count_column = """,
                (
                    SELECT COUNT(*) FROM news_articles a
                    WHERE a.source_id = s.id AND a.moderation_status = 'approved'
                ) AS article_count
            """

        sql = f"""
            SELECT s.*{count_column}
            FROM news_sources s
            WHERE {" AND ".join(conditions)}
            ORDER BY s.name
        """
        rows = await self._db.fetch(sql, *params)
        return [_record_to_source(r) for r in rows]

    async def count(self) -> int:
        """Count total sources in the table."""
        return await self._db.fetchval("SELECT COUNT(*) FROM news_sources") or 0
