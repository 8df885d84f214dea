"""Structured logging for the task manager.

structlog renders through the stdlib logging module, so uvicorn's records
and ours share one output: JSON in production, console lines in debug. The
request middleware binds request_id, method and path into contextvars and
every entry logged while serving that request carries them.
"""

import logging
import sys
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import Processor

from task_manager.config import settings


def _build_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _select_renderer() -> Processor:
    if settings.debug:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging() -> None:
    """Configure structlog on top of the stdlib logging module."""
    processors = _build_processors()

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=_select_renderer(), foreign_pre_chain=processors)
    )
    logging.basicConfig(handlers=[handler], level=logging.DEBUG if settings.debug else logging.INFO)

    # The request middleware already logs one line per request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> BoundLogger:
    return structlog.get_logger(name)


def elapsed_ms(start: float) -> float:
    """Milliseconds since a time.perf_counter() reading, rounded for logs."""
    return round((time.perf_counter() - start) * 1000, 2)


@asynccontextmanager
async def async_log_timing(operation: str, logger: BoundLogger) -> AsyncIterator[None]:
    """Log how long the enclosed storage call took, whether or not it succeeded."""
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.info(f"{operation} completed", operation=operation, duration_ms=elapsed_ms(start))


def log_exception(logger: BoundLogger, exc: BaseException, context: str, **extra: Any) -> None:
    """Log exc at error level with its traceback.

    Used wherever a failure is answered with a generic 500, so the log is
    the only place the real cause shows up.
    """
    logger.error(
        context,
        exc_info=exc,
        error=str(exc),
        error_type=type(exc).__name__,
        **extra,
    )
