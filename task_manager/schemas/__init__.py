"""Pydantic schemas package."""

from task_manager.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from task_manager.schemas.base import ErrorResponse
from task_manager.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from task_manager.schemas.user import UserResponse

__all__ = [
    "AuthResponse",
    "ErrorResponse",
    "LoginRequest",
    "RegisterRequest",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "UserResponse",
]
