"""FastAPI providers that bind repositories to the request's session.

Tests replace these through app.dependency_overrides to run against the
in-memory variants.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from task_manager.database import get_db
from task_manager.repositories import (
    SqlTaskRepository,
    SqlUserRepository,
    TaskRepository,
    UserRepository,
)


def get_task_repository(db: AsyncSession = Depends(get_db)) -> TaskRepository:
    return SqlTaskRepository(db)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return SqlUserRepository(db)
