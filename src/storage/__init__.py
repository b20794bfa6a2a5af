"""Storage layer for article persistence."""

from src.storage.database import Database, StorageUnavailableError
from src.storage.repository import ArticleRepository
from src.storage.schemas import Article, ArticleQuery, ArticleTag, Category, ModerationStatus

__all__ = [
    "Article",
    "ArticleQuery",
    "ArticleRepository",
    "ArticleTag",
    "Category",
    "Database",
    "ModerationStatus",
    "StorageUnavailableError",
]
