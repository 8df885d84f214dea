"""Database configuration and session management."""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from task_manager.config import mask_database_url, settings
from task_manager.errors import StorageError
from task_manager.logger import async_log_timing, get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


@dataclass(frozen=True)
class PoolOptions:
    """Connection pool bounds.

    max_open_connections caps connections in use at once, max_idle_connections
    is how many stay warm in the pool, and connection_max_lifetime (seconds)
    recycles long-lived connections.
    """

    max_open_connections: int = 25
    max_idle_connections: int = 5
    connection_max_lifetime: int = 300

    def __post_init__(self) -> None:
        if self.max_open_connections < 1:
            raise ValueError("max_open_connections must be at least 1")
        if self.max_idle_connections < 0:
            raise ValueError("max_idle_connections must not be negative")
        if self.max_idle_connections > self.max_open_connections:
            raise ValueError("max_idle_connections cannot exceed max_open_connections")

    @classmethod
    def from_settings(cls) -> "PoolOptions":
        return cls(
            max_open_connections=settings.db_max_open_connections,
            max_idle_connections=settings.db_max_idle_connections,
            connection_max_lifetime=settings.db_connection_max_lifetime,
        )

    def engine_kwargs(self) -> dict[str, int | bool]:
        """Translate pool bounds into create_async_engine arguments."""
        return {
            "pool_size": self.max_idle_connections,
            "max_overflow": self.max_open_connections - self.max_idle_connections,
            "pool_recycle": self.connection_max_lifetime,
            "pool_pre_ping": True,
        }


class StorageGateway:
    """Owns the process-wide engine and hands out sessions to repositories."""

    def __init__(self) -> None:
        self._engine: AsyncEngine | None = None
        self._session_maker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def initialize(self, url: str, options: PoolOptions | None = None) -> None:
        """Open the pool and confirm the backend answers before serving traffic."""
        if self._engine is not None:
            return

        options = options or PoolOptions()
        engine = create_async_engine(url, echo=settings.debug, **options.engine_kwargs())
        try:
            async with async_log_timing("database_ping", logger=logger):
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            await engine.dispose()
            raise StorageError(f"database unreachable: {exc}") from exc

        self._engine = engine
        self._session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(
            "Database pool initialized",
            database_url=mask_database_url(url),
            **options.engine_kwargs(),
        )

    def handle(self) -> async_sessionmaker[AsyncSession]:
        """Return the shared session factory."""
        if self._session_maker is None:
            raise RuntimeError("Storage gateway is not initialized")
        return self._session_maker

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.handle()() as session:
            yield session

    async def create_schema(self) -> None:
        """Create missing tables for the registered models."""
        if self._engine is None:
            raise RuntimeError("Storage gateway is not initialized")

        from task_manager import models  # noqa: F401

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def shutdown(self) -> None:
        """Release every pooled connection. Safe to call more than once."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        logger.info("Database pool released")


gateway = StorageGateway()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database session."""
    async with gateway.session() as session:
        yield session
