"""
structlog setup for the aggregator.

Services and the API log through ``structlog.get_logger``; storage and
ingestion use plain ``logging`` loggers, which share the same stdout
handler and level. Production renders JSON, anything else a coloured
console format.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from structlog.types import Processor

from src.config.settings import get_settings

# Chatty below WARNING during a sync.
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "asyncpg")


def _processor_chain(json_output: bool) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        chain += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        chain.append(structlog.dev.ConsoleRenderer(colors=True))
    return chain


def setup_logging(level: str | None = None) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        level: Overrides LOG_LEVEL (the CLI's --log-level)
    """
    settings = get_settings()
    numeric_level = logging.getLevelName(level or settings.log_level)

    structlog.configure(
        processors=_processor_chain(json_output=settings.is_production),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def log_context(**values) -> Iterator[None]:
    """
    Attach ``values`` to every structlog line emitted inside the block.

    Used for ``request_id`` per API request and ``sync_id`` per sync run.
    Outer bindings are restored on exit, so a sync started from a request
    keeps its request_id.
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield
