"""
FastAPI news service.

Provides REST API for the news aggregator:
- GET /news/articles - Filtered, paginated articles
- GET /news/stats - Aggregate counts
- GET /news/sources, /news/categories - Source and category listings
- POST /news/sync - Trigger a feed sync
- GET /health - Service health check
"""

from src.api.app import create_app

__all__ = ["create_app"]
