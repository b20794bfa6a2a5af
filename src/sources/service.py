"""Source listing and seeding from a bundled JSON feed list."""

import json
import logging
from pathlib import Path
from typing import Any

from src.sources.config import SourcesConfig
from src.sources.repository import SourcesRepository
from src.sources.schemas import Source
from src.storage.database import Database

logger = logging.getLogger(__name__)

BUNDLED_SEED_FILE = Path(__file__).parent / "data" / "seed_sources.json"


class SourcesService:
    """
    Read access to the feed registry, plus seeding.

    Seeding upserts by feed URL, so re-running it refreshes names,
    categories and intervals without touching fetch bookkeeping.
    """

    def __init__(
        self,
        database: Database,
        config: SourcesConfig | None = None,
    ) -> None:
        self._config = config or SourcesConfig()
        self._repo = SourcesRepository(database)

    async def list_sources(
        self,
        category: str | None = None,
        include_stats: bool = False,
    ) -> list[Source]:
        """Active sources by name; include_stats adds approved article counts."""
        return await self._repo.list_active(
            category=category, include_stats=include_stats
        )

    def _source_from_seed(self, entry: dict[str, Any]) -> Source:
        return Source(
            name=entry["name"],
            feed_url=entry["feed_url"],
            description=entry.get("description", ""),
            website_url=entry.get("website_url", ""),
            category=entry.get("category", ""),
            is_active=entry.get("is_active", True),
            fetch_interval_minutes=entry.get(
                "fetch_interval_minutes", self._config.default_fetch_interval_minutes
            ),
        )

    async def seed_from_json(self, path: Path | None = None) -> int:
        """
        Upsert every source listed in a seed file.

        Args:
            path: Seed JSON (a list of objects with at least name and
                feed_url). Defaults to SOURCES_SEED_FILE, then the bundled list.

        Returns:
            Number of sources upserted
        """
        seed_path = path or self._config.seed_file or BUNDLED_SEED_FILE
        entries = json.loads(Path(seed_path).read_text(encoding="utf-8"))

        count = await self._repo.bulk_upsert([self._source_from_seed(e) for e in entries])
        logger.info("Upserted %d sources from %s", count, seed_path)
        return count

    async def ensure_seeded(self) -> int:
        """
        Seed only when news_sources is empty and seeding is enabled.

        Returns:
            Number of sources seeded, 0 when skipped
        """
        if not self._config.seed_on_init:
            return 0

        existing = await self._repo.count()
        if existing:
            logger.debug("news_sources already has %d rows; not seeding", existing)
            return 0

        return await self.seed_from_json()
