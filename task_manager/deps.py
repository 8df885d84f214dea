"""Common FastAPI dependencies for consistent type annotations.

Usage:
    from task_manager.deps import CurrentUserId, TaskId, TaskRepo

    async def my_endpoint(user_id: CurrentUserId, task_id: TaskId, tasks: TaskRepo):
        # user_id is the authenticated user's id
        # task_id is a path id that can exist in the tasks table
        # tasks is bound to the request's database session
        ...

Dependencies resolve in the order they are declared, so declare
CurrentUserId first: a request without a valid token is answered 401
before its path or body is looked at.
"""

from collections.abc import Awaitable, Callable
from typing import Annotated, TypeVar

from fastapi import Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from task_manager.auth import get_current_user_id
from task_manager.providers import get_task_repository, get_user_repository
from task_manager.repositories import TaskRepository, UserRepository
from task_manager.utils import raise_not_found

# tasks.id is a 32-bit serial column
MAX_TASK_ID = 2**31 - 1

BodyT = TypeVar("BodyT", bound=BaseModel)


def task_id_in_range(task_id: int) -> int:
    """Ids outside the serial column's range cannot exist, so they are 404."""
    if not 1 <= task_id <= MAX_TASK_ID:
        raise_not_found("Task")
    return task_id


def json_body(model: type[BodyT]) -> Callable[[Request], Awaitable[BodyT]]:
    """Parse the request body as `model` inside the dependency graph.

    FastAPI decodes declared body parameters before any dependency runs;
    parsing here instead keeps malformed bodies behind authentication.
    """

    async def parse(request: Request) -> BodyT:
        try:
            return model.model_validate_json(await request.body())
        except ValidationError as exc:
            raise RequestValidationError(exc.errors(include_url=False)) from exc

    return parse


CurrentUserId = Annotated[str, Depends(get_current_user_id)]
TaskId = Annotated[int, Depends(task_id_in_range)]
TaskRepo = Annotated[TaskRepository, Depends(get_task_repository)]
UserRepo = Annotated[UserRepository, Depends(get_user_repository)]

__all__ = ["CurrentUserId", "TaskId", "TaskRepo", "UserRepo", "json_body"]
