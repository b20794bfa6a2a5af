"""Feed ingestion: retrieval, entry processing and per-source bookkeeping."""

from src.ingestion.feed_client import FeedClient, FeedFetchError
from src.ingestion.fetcher import FeedFetcher
from src.ingestion.processor import ItemProcessor
from src.ingestion.schemas import EntryBatchResult, FetchResult, ProcessedEntry

__all__ = [
    "EntryBatchResult",
    "FeedClient",
    "FeedFetchError",
    "FeedFetcher",
    "FetchResult",
    "ItemProcessor",
    "ProcessedEntry",
]
