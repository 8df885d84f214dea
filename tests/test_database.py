"""Tests for the storage gateway and pool options."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from task_manager.database import PoolOptions, StorageGateway
from task_manager.errors import StorageError


def _engine(connect_error: Exception | None = None) -> MagicMock:
    engine = MagicMock()
    engine.dispose = AsyncMock()
    conn = MagicMock()
    conn.execute = AsyncMock()
    ctx = MagicMock()
    if connect_error is not None:
        ctx.__aenter__ = AsyncMock(side_effect=connect_error)
    else:
        ctx.__aenter__ = AsyncMock(return_value=conn)
    ctx.__aexit__ = AsyncMock(return_value=False)
    engine.connect.return_value = ctx
    return engine


def test_pool_options_defaults_map_to_engine_kwargs() -> None:
    kwargs = PoolOptions().engine_kwargs()

    assert kwargs == {
        "pool_size": 5,
        "max_overflow": 20,
        "pool_recycle": 300,
        "pool_pre_ping": True,
    }


def test_pool_options_custom_bounds() -> None:
    kwargs = PoolOptions(
        max_open_connections=10, max_idle_connections=10, connection_max_lifetime=60
    ).engine_kwargs()

    assert (kwargs["pool_size"], kwargs["max_overflow"], kwargs["pool_recycle"]) == (10, 0, 60)


@pytest.mark.parametrize(
    ("open_", "idle"),
    [(0, 0), (5, -1), (5, 6)],
)
def test_pool_options_rejects_inconsistent_bounds(open_: int, idle: int) -> None:
    with pytest.raises(ValueError):
        PoolOptions(max_open_connections=open_, max_idle_connections=idle)


def test_handle_before_initialize_raises() -> None:
    gateway = StorageGateway()

    assert gateway.is_initialized is False
    with pytest.raises(RuntimeError, match="not initialized"):
        gateway.handle()


@pytest.mark.asyncio
async def test_create_schema_before_initialize_raises() -> None:
    with pytest.raises(RuntimeError):
        await StorageGateway().create_schema()


@pytest.mark.asyncio
async def test_initialize_unreachable_backend_raises_storage_error() -> None:
    """
    GIVEN a backend that refuses connections
    WHEN the gateway is initialized
    THEN a StorageError is raised and the half-built pool is disposed
    """
    engine = _engine(OperationalError("SELECT 1", {}, ConnectionRefusedError("refused")))
    gateway = StorageGateway()

    with patch("task_manager.database.create_async_engine", return_value=engine):
        with pytest.raises(StorageError, match="database unreachable"):
            await gateway.initialize("postgresql+asyncpg://u:p@nowhere/db")

    engine.dispose.assert_awaited_once()
    assert gateway.is_initialized is False


@pytest.mark.asyncio
async def test_initialize_passes_pool_bounds_and_pings() -> None:
    engine = _engine()
    gateway = StorageGateway()
    options = PoolOptions(max_open_connections=8, max_idle_connections=2, connection_max_lifetime=30)

    with patch("task_manager.database.create_async_engine", return_value=engine) as create:
        await gateway.initialize("postgresql+asyncpg://u:p@db/tasks", options)

    _, kwargs = create.call_args
    assert kwargs["pool_size"] == 2
    assert kwargs["max_overflow"] == 6
    assert kwargs["pool_recycle"] == 30
    engine.connect.return_value.__aenter__.return_value.execute.assert_awaited_once()
    assert gateway.is_initialized is True
    assert gateway.handle() is not None


@pytest.mark.asyncio
async def test_initialize_twice_keeps_first_pool() -> None:
    engine = _engine()
    gateway = StorageGateway()

    with patch("task_manager.database.create_async_engine", return_value=engine) as create:
        await gateway.initialize("postgresql+asyncpg://u:p@db/tasks")
        await gateway.initialize("postgresql+asyncpg://u:p@db/tasks")

    create.assert_called_once()


@pytest.mark.asyncio
async def test_shutdown_is_idempotent() -> None:
    engine = _engine()
    gateway = StorageGateway()

    with patch("task_manager.database.create_async_engine", return_value=engine):
        await gateway.initialize("postgresql+asyncpg://u:p@db/tasks")

    await gateway.shutdown()
    await gateway.shutdown()

    engine.dispose.assert_awaited_once()
    assert gateway.is_initialized is False
    with pytest.raises(RuntimeError):
        gateway.handle()


@pytest.mark.asyncio
async def test_create_schema_runs_create_all() -> None:
    engine = _engine()
    conn = MagicMock()
    conn.run_sync = AsyncMock()
    begin_ctx = MagicMock()
    begin_ctx.__aenter__ = AsyncMock(return_value=conn)
    begin_ctx.__aexit__ = AsyncMock(return_value=False)
    engine.begin.return_value = begin_ctx
    gateway = StorageGateway()

    with patch("task_manager.database.create_async_engine", return_value=engine):
        await gateway.initialize("postgresql+asyncpg://u:p@db/tasks")
    await gateway.create_schema()

    conn.run_sync.assert_awaited_once()
