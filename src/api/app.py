"""
FastAPI application factory for the news API.

Every response, success or failure, uses the ``{"success": ...}``
envelope. Failures map to status codes here in one place:
storage down is 503, bad input is 400, auth is 401, unknown routes are
404, and anything unhandled is 500.
"""

import time
import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.api.dependencies import cleanup_dependencies
from src.api.middleware.timeout import TimeoutMiddleware
from src.api.routes import articles, health, sources, stats, sync
from src.config.settings import Settings, get_settings
from src.observability.logging import log_context
from src.storage.database import StorageUnavailableError

logger = structlog.get_logger(__name__)

API_VERSION = "0.1.0"

OPENAPI_TAGS = [
    {"name": "health", "description": "Liveness and database reachability"},
    {"name": "articles", "description": "Filtered, paginated article listing"},
    {"name": "stats", "description": "Counts over approved articles"},
    {"name": "sources", "description": "Feed registry and categories"},
    {"name": "sync", "description": "Cron-triggered feed sync"},
]

API_DESCRIPTION = """
Cybersecurity news collected from RSS and Atom feeds.

Read endpoints require an `X-API-KEY` header when `API_KEYS` is set.
`POST /news/sync` requires `Authorization: Bearer <CRON_SECRET>` when
`CRON_SECRET` is set.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("News API started")
    yield
    await cleanup_dependencies()
    logger.info("News API stopped")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
    )


def _validation_summary(exc: RequestValidationError) -> str:
    # loc[0] is the parameter source (query, path, body)
    parts = [
        f"{'.'.join(str(p) for p in err['loc'][1:])}: {err['msg']}"
        for err in exc.errors()
    ]
    return "; ".join(parts) or "Invalid request"


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Registered before the request logger, so the deadline sits inside it.
    if settings.request_timeout_seconds > 0:
        app.add_middleware(
            TimeoutMiddleware,
            timeout_seconds=settings.request_timeout_seconds,
        )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = (
            request.headers.get("X-Request-ID")
            or request.headers.get("X-Correlation-ID")
            or str(uuid.uuid4())
        )

        with log_context(request_id=request_id):
            started = time.perf_counter()
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        return response


def _add_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorageUnavailableError)
    async def on_storage_unavailable(request: Request, exc: StorageUnavailableError):
        logger.error("Storage unavailable", path=request.url.path, error=str(exc))
        return _error(503, str(exc))

    @app.exception_handler(HTTPException)
    async def on_http_error(request: Request, exc: HTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def on_invalid_request(request: Request, exc: RequestValidationError):
        return _error(400, _validation_summary(exc))

    @app.exception_handler(Exception)
    async def on_unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        return _error(500, "Internal server error")


def create_app() -> FastAPI:
    """Build the API with middleware, error envelopes and all routers."""
    settings = get_settings()

    app = FastAPI(
        title="News Aggregator API",
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=OPENAPI_TAGS,
    )

    _add_middleware(app, settings)
    _add_exception_handlers(app)

    for module, tag in (
        (health, "health"),
        (articles, "articles"),
        (stats, "stats"),
        (sources, "sources"),
        (sync, "sync"),
    ):
        app.include_router(module.router, tags=[tag])

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "News Aggregator API",
            "version": API_VERSION,
            "docs": "/docs",
        }

    return app
