"""
Per-request deadline for the news API.

Requests that outlive the deadline get a 504 in the standard error
envelope. A full feed sync runs for minutes, so the sync trigger is
exempt along with health checks.
"""

import asyncio
from collections.abc import Iterable

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)

DEFAULT_EXEMPT_PATHS = ("/health", "/news/sync")


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Cancel requests that exceed ``timeout_seconds`` and answer 504."""

    def __init__(
        self,
        app,
        timeout_seconds: float = 30.0,
        exempt_paths: Iterable[str] = DEFAULT_EXEMPT_PATHS,
    ):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.exempt_paths = tuple(exempt_paths)

    def _is_exempt(self, path: str) -> bool:
        return path.startswith(self.exempt_paths)

    async def dispatch(self, request: Request, call_next):
        if self._is_exempt(request.url.path):
            return await call_next(request)

        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await call_next(request)
        except TimeoutError:
            logger.warning(
                "Request deadline exceeded",
                method=request.method,
                path=request.url.path,
                timeout_seconds=self.timeout_seconds,
            )
            return JSONResponse(
                status_code=504,
                content={
                    "success": False,
                    "error": f"Request timed out after {self.timeout_seconds:g}s",
                },
            )
