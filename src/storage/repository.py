"""
Article repository for the news aggregation store.

Tables:
    - news_categories: Editorial categories (managed externally)
    - news_articles: Normalized feed entries, UNIQUE (source_id, guid)
    - news_article_tags: Suggested tags written alongside each article

The news_sources table is owned by src.sources.repository and must be
created first.
"""

import json
import logging
from datetime import datetime
from typing import Any

from src.storage.database import Database
from src.storage.schemas import (
    Article,
    ArticleQuery,
    ArticleTag,
    Category,
    ModerationStatus,
)

logger = logging.getLogger(__name__)

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS news_categories (
    id          BIGSERIAL PRIMARY KEY,
    name        TEXT NOT NULL,
    slug        TEXT NOT NULL UNIQUE,
    description TEXT NOT NULL DEFAULT '',
    sort_order  INTEGER NOT NULL DEFAULT 0,
    is_active   BOOLEAN NOT NULL DEFAULT TRUE,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS news_articles (
    id                BIGSERIAL PRIMARY KEY,
    source_id         BIGINT NOT NULL REFERENCES news_sources(id),
    category_id       BIGINT REFERENCES news_categories(id) ON DELETE SET NULL,
    title             TEXT NOT NULL,
    description       TEXT NOT NULL DEFAULT '',
    content           TEXT NOT NULL DEFAULT '',
    excerpt           TEXT NOT NULL DEFAULT '',
    author            TEXT NOT NULL DEFAULT '',
    original_url      TEXT NOT NULL,
    guid              TEXT NOT NULL,
    published_at      TIMESTAMPTZ NOT NULL,
    image_url         TEXT,
    thumbnail_url     TEXT,
    keywords          TEXT[] NOT NULL DEFAULT '{}',
    sentiment_score   DOUBLE PRECISION NOT NULL DEFAULT 0
        CHECK (sentiment_score BETWEEN -1 AND 1),
    read_time_minutes INTEGER NOT NULL DEFAULT 1 CHECK (read_time_minutes >= 1),
    view_count        INTEGER NOT NULL DEFAULT 0,
    like_count        INTEGER NOT NULL DEFAULT 0,
    share_count       INTEGER NOT NULL DEFAULT 0,
    is_featured       BOOLEAN NOT NULL DEFAULT FALSE,
    is_trending       BOOLEAN NOT NULL DEFAULT FALSE,
    is_breaking       BOOLEAN NOT NULL DEFAULT FALSE,
    moderation_status TEXT NOT NULL DEFAULT 'approved'
        CHECK (moderation_status IN ('pending', 'approved', 'rejected')),
    created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    CONSTRAINT uq_news_articles_source_guid UNIQUE (source_id, guid)
);

CREATE INDEX IF NOT EXISTS idx_news_articles_status_published
    ON news_articles(moderation_status, published_at DESC);
CREATE INDEX IF NOT EXISTS idx_news_articles_created_at
    ON news_articles(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_news_articles_category
    ON news_articles(category_id);
CREATE INDEX IF NOT EXISTS idx_news_articles_trending
    ON news_articles(published_at DESC) WHERE is_trending = TRUE;
CREATE INDEX IF NOT EXISTS idx_news_articles_breaking
    ON news_articles(published_at DESC) WHERE is_breaking = TRUE;

CREATE TABLE IF NOT EXISTS news_article_tags (
    id               BIGSERIAL PRIMARY KEY,
    article_id       BIGINT NOT NULL REFERENCES news_articles(id) ON DELETE CASCADE,
    tag_name         TEXT NOT NULL,
    confidence_score DOUBLE PRECISION NOT NULL,
    created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (article_id, tag_name)
);

CREATE INDEX IF NOT EXISTS idx_news_article_tags_name
    ON news_article_tags(tag_name);
"""

_INSERT_ARTICLE_SQL = """
INSERT INTO news_articles (
    source_id, category_id, title, description, content, excerpt, author,
    original_url, guid, published_at, image_url, thumbnail_url,
    keywords, sentiment_score, read_time_minutes,
    is_trending, is_breaking, moderation_status
) VALUES (
    $1, $2, $3, $4, $5, $6, $7,
    $8, $9, $10, $11, $12,
    $13, $14, $15,
    $16, $17, $18
)
ON CONFLICT (source_id, guid) DO NOTHING
RETURNING *
"""

_INSERT_TAG_SQL = """
INSERT INTO news_article_tags (article_id, tag_name, confidence_score)
VALUES ($1, $2, $3)
ON CONFLICT (article_id, tag_name) DO NOTHING
"""

_SELECT_BY_GUID_SQL = """
SELECT * FROM news_articles WHERE source_id = $1 AND guid = $2
"""

_LIST_COLUMNS = """
    a.*,
    s.name AS source_name,
    c.name AS category_name,
    COALESCE(
        (
            SELECT json_agg(
                json_build_object(
                    'tag_name', t.tag_name,
                    'confidence_score', t.confidence_score
                )
                ORDER BY t.id
            )
            FROM news_article_tags t
            WHERE t.article_id = a.id
        ),
        '[]'::json
    ) AS tags
"""


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so search terms match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_tags(value: Any, article_id: int | None) -> list[ArticleTag]:
    if not value:
        return []
    if isinstance(value, str):
        value = json.loads(value)
    return [
        ArticleTag(
            article_id=article_id,
            tag_name=t["tag_name"],
            confidence_score=t["confidence_score"],
        )
        for t in value
    ]


def _record_to_article(record) -> Article:
    """Convert an asyncpg Record (or a dict shaped like one) to an Article."""
    return Article(
        id=record["id"],
        source_id=record["source_id"],
        category_id=record["category_id"],
        title=record["title"],
        description=record["description"],
        content=record["content"],
        excerpt=record["excerpt"],
        author=record["author"],
        original_url=record["original_url"],
        guid=record["guid"],
        published_at=record["published_at"],
        image_url=record["image_url"],
        thumbnail_url=record["thumbnail_url"],
        keywords=list(record["keywords"] or []),
        sentiment_score=record["sentiment_score"],
        read_time_minutes=record["read_time_minutes"],
        view_count=record["view_count"],
        like_count=record["like_count"],
        share_count=record["share_count"],
        is_featured=record["is_featured"],
        is_trending=record["is_trending"],
        is_breaking=record["is_breaking"],
        moderation_status=ModerationStatus(record["moderation_status"]),
        created_at=record["created_at"],
        updated_at=record["updated_at"],
        source_name=record.get("source_name"),
        category_name=record.get("category_name"),
        tags=_parse_tags(record.get("tags"), record["id"]),
    )


class ArticleRepository:
    """
    Repository for article storage and retrieval.

    Inserts are insert-or-ignore on (source_id, guid); articles are never
    updated or deleted here.
    """

    def __init__(self, database: Database):
        """
        Initialize repository.

        Args:
            database: Connected Database instance
        """
        self._db = database

    async def create_tables(self) -> None:
        """Create category, article and tag tables (idempotent)."""
        await self._db.execute(_CREATE_TABLES_SQL)
        logger.info("News article tables ensured")

    async def get_by_source_guid(self, source_id: int, guid: str) -> Article | None:
        """Look up an article by its dedup key."""
        row = await self._db.fetchrow(_SELECT_BY_GUID_SQL, source_id, guid)
        return _record_to_article(row) if row else None

    async def insert(
        self,
        article: Article,
        tags: list[ArticleTag] | None = None,
    ) -> tuple[Article, bool]:
        """
        Insert an article and its tags in one transaction.

        If another writer already stored the same (source_id, guid), nothing
        is written and the stored article is returned instead.

        Returns:
            (stored article, True if this call created it)
        """
        tags = tags or []

        async with self._db.transaction() as conn:
            row = await conn.fetchrow(
                _INSERT_ARTICLE_SQL,
                article.source_id,
                article.category_id,
                article.title,
                article.description,
                article.content,
                article.excerpt,
                article.author,
                article.original_url,
                article.guid,
                article.published_at,
                article.image_url,
                article.thumbnail_url,
                article.keywords,
                article.sentiment_score,
                article.read_time_minutes,
                article.is_trending,
                article.is_breaking,
                article.moderation_status.value,
            )

            if row is None:
                existing = await conn.fetchrow(
                    _SELECT_BY_GUID_SQL, article.source_id, article.guid
                )
                logger.debug(
                    "Article %s/%s already stored by a concurrent writer",
                    article.source_id,
                    article.guid,
                )
                return _record_to_article(existing), False

            stored = _record_to_article(row)

            if tags:
                await conn.executemany(
                    _INSERT_TAG_SQL,
                    [(stored.id, t.tag_name, t.confidence_score) for t in tags],
                )
                stored.tags = [
                    ArticleTag(
                        article_id=stored.id,
                        tag_name=t.tag_name,
                        confidence_score=t.confidence_score,
                    )
                    for t in tags
                ]

        return stored, True

    def _build_article_filters(
        self,
        query: ArticleQuery,
        *,
        created_since: datetime | None = None,
        param_idx: int = 1,
    ) -> tuple[str, list[Any], int]:
        """
        Build WHERE clause from article query options.

        Returns (where_clause, params, next_param_idx). Shared by
        list_articles and count_articles so both see the same rows.
        """
        conditions: list[str] = [f"a.moderation_status = ${param_idx}"]
        params: list[Any] = [query.moderation_status.value]
        param_idx += 1

        if query.category_ids:
            conditions.append(f"a.category_id = ANY(${param_idx}::bigint[])")
            params.append(query.category_ids)
            param_idx += 1

        if query.source_ids:
            conditions.append(f"a.source_id = ANY(${param_idx}::bigint[])")
            params.append(query.source_ids)
            param_idx += 1

        if query.date_from is not None:
            conditions.append(f"a.published_at >= ${param_idx}")
            params.append(query.date_from)
            param_idx += 1

        if query.date_to is not None:
            conditions.append(f"a.published_at <= ${param_idx}")
            params.append(query.date_to)
            param_idx += 1

        for column, value in (
            ("is_featured", query.featured),
            ("is_trending", query.trending),
            ("is_breaking", query.breaking),
        ):
            if value is not None:
                conditions.append(f"a.{column} = ${param_idx}")
                params.append(value)
                param_idx += 1

        if query.search:
            conditions.append(
                f"(a.title ILIKE ${param_idx} OR a.description ILIKE ${param_idx})"
            )
            params.append(f"%{_escape_like(query.search)}%")
            param_idx += 1

        if created_since is not None:
            conditions.append(f"a.created_at >= ${param_idx}")
            params.append(created_since)
            param_idx += 1

        return " AND ".join(conditions), params, param_idx

    async def list_articles(self, query: ArticleQuery) -> list[Article]:
        """List articles with joined source, category and tags."""
        where_clause, params, idx = self._build_article_filters(query)
        order = "ASC" if query.sort_order == "asc" else "DESC"

        sql = f"""
            SELECT {_LIST_COLUMNS}
            FROM news_articles a
            LEFT JOIN news_sources s ON s.id = a.source_id
            LEFT JOIN news_categories c ON c.id = a.category_id
            WHERE {where_clause}
            ORDER BY a.{query.sort_by} {order}, a.id {order}
            LIMIT ${idx} OFFSET ${idx + 1}
        """
        params.extend([query.limit, query.offset])
        rows = await self._db.fetch(sql, *params)
        return [_record_to_article(r) for r in rows]

    async def count_articles(
        self,
        query: ArticleQuery,
        *,
        created_since: datetime | None = None,
    ) -> int:
        """Count articles matching the same filters as list_articles."""
        where_clause, params, _idx = self._build_article_filters(
            query, created_since=created_since
        )
        sql = f"SELECT COUNT(*) FROM news_articles a WHERE {where_clause}"
        return await self._db.fetchval(sql, *params) or 0

    async def list_categories(self, include_stats: bool = False) -> list[Category]:
        """Active categories in display order, optionally with approved counts."""
        count_column = (
            """,
            (
                SELECT COUNT(*) FROM news_articles a
                WHERE a.category_id = c.id AND a.moderation_status = 'approved'
            ) AS article_count
            """
            if include_stats
            else ""
        )
        rows = await self._db.fetch(
            f"""
            SELECT c.id, c.name, c.slug, c.description, c.sort_order, c.is_active
                   {count_column}
            FROM news_categories c
            WHERE c.is_active = TRUE
            ORDER BY c.sort_order, c.name
            """
        )
        return [
            Category(
                id=r["id"],
                name=r["name"],
                slug=r["slug"],
                description=r["description"],
                sort_order=r["sort_order"],
                is_active=r["is_active"],
                article_count=r.get("article_count") if include_stats else None,
            )
            for r in rows
        ]
