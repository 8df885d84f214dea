"""Per-request deadlines for handler bodies."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from task_manager.logger import get_logger
from task_manager.utils.exceptions import raise_gateway_timeout

logger = get_logger(__name__)


@asynccontextmanager
async def request_deadline(seconds: float, operation: str) -> AsyncIterator[None]:
    """Cancel the enclosed work after `seconds` and answer 504.

    Cancellation reaches the database driver, which aborts the running query.
    """
    try:
        async with asyncio.timeout(seconds):
            yield
    except TimeoutError as exc:
        logger.warning("Request deadline exceeded", operation=operation, timeout_seconds=seconds)
        raise_gateway_timeout("Request timed out", cause=exc)
