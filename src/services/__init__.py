"""Services that orchestrate feed sync and article queries."""

from src.services.aggregation_service import (
    NewsAggregationService,
    create_aggregation_service,
)
from src.services.schemas import ArticlePage, NewsStats, Pagination, SyncSummary

__all__ = [
    "ArticlePage",
    "NewsAggregationService",
    "NewsStats",
    "Pagination",
    "SyncSummary",
    "create_aggregation_service",
]
