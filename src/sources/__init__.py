"""News sources: the feed registry, per-source fetch bookkeeping and seeding."""

from src.sources.config import SourcesConfig
from src.sources.repository import SourcesRepository
from src.sources.schemas import Source
from src.sources.service import SourcesService

__all__ = [
    "Source",
    "SourcesConfig",
    "SourcesRepository",
    "SourcesService",
]
