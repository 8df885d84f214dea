"""API routers package."""

from task_manager.routers import auth, health, tasks

__all__ = [
    "auth",
    "health",
    "tasks",
]
