"""Task and user repositories."""

from task_manager.repositories.base import TaskRepository, UserDraft, UserRepository
from task_manager.repositories.memory import (
    InMemoryStore,
    InMemoryTaskRepository,
    InMemoryUserRepository,
)
from task_manager.repositories.sql import SqlTaskRepository, SqlUserRepository

__all__ = [
    "InMemoryStore",
    "InMemoryTaskRepository",
    "InMemoryUserRepository",
    "SqlTaskRepository",
    "SqlUserRepository",
    "TaskRepository",
    "UserDraft",
    "UserRepository",
]
