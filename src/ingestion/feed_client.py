"""
RSS/Atom feed retrieval.

FeedClient downloads a feed with httpx and parses it with feedparser.
Every way a fetch can fail (HTTP status, transport error, timeout,
unparseable body) surfaces as a single FeedFetchError so callers record
one kind of failure.
"""

import asyncio
import logging
from typing import Any

import feedparser
import httpx

from src.config.settings import get_settings

logger = logging.getLogger(__name__)


class FeedFetchError(Exception):
    """A feed could not be retrieved or parsed."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(message)


class FeedClient:
    """
    Async feed downloader.

    One httpx.AsyncClient is shared across fetches and created lazily.
    Parsing runs in a worker thread so a slow parse does not block the
    event loop; the timeout covers download and parse together.

    Usage:
        async with FeedClient() as client:
            entries = await client.fetch("https://krebsonsecurity.com/feed/")
    """

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize feed client.

        Args:
            timeout: Seconds allowed for download plus parse
            user_agent: User-Agent header sent with every request
            http_client: Pre-built client (tests); closed by the caller
        """
        settings = get_settings()
        self._timeout = timeout or settings.feed_timeout_seconds
        self._user_agent = user_agent or settings.feed_user_agent
        self._client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                headers={
                    "User-Agent": self._user_agent,
                    "Accept": "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8",
                },
            )
        return self._client

    async def fetch(self, url: str) -> list[Any]:
        """
        Download and parse a feed.

        Returns:
            The feed's entries (feedparser dicts). A well-formed feed with
            no items returns an empty list.

        Raises:
            FeedFetchError: On any retrieval or parse failure
        """
        try:
            return await asyncio.wait_for(self._fetch(url), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise FeedFetchError(url, f"Timed out after {self._timeout:g}s") from e

    async def _fetch(self, url: str) -> list[Any]:
        client = self._get_client()
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FeedFetchError(
                url, f"HTTP {e.response.status_code} from feed"
            ) from e
        except httpx.TimeoutException as e:
            raise FeedFetchError(url, f"Timed out after {self._timeout:g}s") from e
        except httpx.HTTPError as e:
            raise FeedFetchError(url, f"Request failed: {str(e) or type(e).__name__}") from e

        feed = await asyncio.to_thread(feedparser.parse, response.content)
        entries = list(feed.get("entries", []))

        if feed.get("bozo") and not entries:
            reason = feed.get("bozo_exception") or "unparseable feed"
            raise FeedFetchError(url, f"Malformed feed: {reason}")

        logger.debug(f"Fetched {len(entries)} entries from {url}")
        return entries

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "FeedClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
