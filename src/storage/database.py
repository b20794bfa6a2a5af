"""
asyncpg pool wrapper for the news store.

Connection-level failures (refused, timed out, pool exhausted) are raised
as StorageUnavailableError so callers can tell an empty result apart from
a store they could not reach. Query errors pass through untouched.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT_SECONDS = 60


class StorageUnavailableError(RuntimeError):
    """The persistence layer could not be reached."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        message = f"Storage unavailable: {detail}" if detail else "Storage unavailable"
        super().__init__(message)


# The server is down, refusing us, or dropped the connection. Client-side
# misuse (InterfaceError in general) and bad queries pass through.
_UNAVAILABLE_ERRORS: tuple[type[BaseException], ...] = (
    OSError,
    asyncio.TimeoutError,
    asyncpg.exceptions.ConnectionDoesNotExistError,
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.CannotConnectNowError,
    asyncpg.exceptions.TooManyConnectionsError,
)


class Database:
    """
    Owns one asyncpg pool for the lifetime of a process or command.

    Example:
        database = Database()
        await database.connect()
        try:
            rows = await database.fetch("SELECT * FROM news_sources")
        finally:
            await database.close()

    Pool bounds and the URL default to DATABASE_URL, DB_POOL_MIN_SIZE
    and DB_POOL_MAX_SIZE.
    """

    def __init__(
        self,
        database_url: str | None = None,
        min_size: int | None = None,
        max_size: int | None = None,
    ):
        settings = get_settings()
        self._dsn = database_url or str(settings.database_url)
        self._pool_bounds = (
            min_size or settings.db_pool_min_size,
            max_size or settings.db_pool_max_size,
        )
        self._pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        """
        Open the pool.

        Raises:
            StorageUnavailableError: If the server cannot be reached
        """
        low, high = self._pool_bounds
        try:
            self._pool = await asyncpg.create_pool(
                self._dsn,
                min_size=low,
                max_size=high,
                command_timeout=COMMAND_TIMEOUT_SECONDS,
            )
        except _UNAVAILABLE_ERRORS as e:
            logger.error("Could not open database pool: %s", e)
            raise StorageUnavailableError(str(e)) from e

        logger.info("Database pool open (%d-%d connections)", low, high)

    async def close(self) -> None:
        pool, self._pool = self._pool, None
        if pool is not None:
            await pool.close()
            logger.info("Database pool closed")

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise StorageUnavailableError("database not connected")
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Borrow a pooled connection, mapping connection failures."""
        try:
            async with self.pool.acquire() as conn:
                yield conn
        except _UNAVAILABLE_ERRORS as e:
            raise StorageUnavailableError(str(e)) from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """
        Borrow a connection inside a transaction.

        Everything run on the yielded connection commits together, or
        rolls back if the block raises:

            async with database.transaction() as conn:
                row = await conn.fetchrow("INSERT ... RETURNING *", ...)
                await conn.executemany("INSERT INTO news_article_tags ...", tags)
        """
        async with self.acquire() as conn, conn.transaction():
            yield conn

    # Single-statement shortcuts, each on its own pooled connection.

    async def execute(self, query: str, *args: Any) -> str:
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args)

    async def health_check(self) -> bool:
        """True when a trivial query round-trips, False when the store is down."""
        try:
            return await self.fetchval("SELECT 1") == 1
        except (StorageUnavailableError, asyncpg.PostgresError):
            return False
