"""Test fixtures and configuration."""

import logging
import os
import sys

import pytest
import pytest_asyncio
import structlog
from httpx import ASGITransport, AsyncClient

# Must be set before task_manager.config builds its settings instance
os.environ["JWT_SECRET"] = "test-signing-secret-with-plenty-of-entropy-0123456789abcdefghijklmnopqrstuvwxyz"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "testing"
os.environ["DEBUG"] = "false"

from task_manager.providers import get_task_repository, get_user_repository  # noqa: E402
from task_manager.repositories import (  # noqa: E402
    InMemoryStore,
    InMemoryTaskRepository,
    InMemoryUserRepository,
)


# --- Structlog Configuration for Tests ---
@pytest.fixture(autouse=True, scope="session")
def configure_structlog_for_tests():
    """Configure structlog for proper capsys capture in tests."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(),
        foreign_pre_chain=processors[:-1],
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    yield

    structlog.reset_defaults()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def user_repo(store: InMemoryStore) -> InMemoryUserRepository:
    return InMemoryUserRepository(store)


@pytest.fixture
def task_repo(store: InMemoryStore) -> InMemoryTaskRepository:
    return InMemoryTaskRepository(store)


@pytest.fixture
def app(user_repo, task_repo):
    """The FastAPI app with repositories bound to the in-memory store."""
    from task_manager.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_user_repository] = lambda: user_repo
    fastapi_app.dependency_overrides[get_task_repository] = lambda: task_repo
    try:
        yield fastapi_app
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app):
    """Async test client without auth headers."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client_instance:
        yield client_instance
