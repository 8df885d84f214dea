"""Task API router. Every route is scoped to the authenticated user.

Handlers declare CurrentUserId before the path id and the body, so an
unauthenticated request is rejected with 401 before either is validated.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from task_manager.config import settings
from task_manager.deps import CurrentUserId, TaskId, TaskRepo, json_body
from task_manager.logger import get_logger
from task_manager.models import Task
from task_manager.schemas import ErrorResponse, TaskCreate, TaskResponse, TaskUpdate
from task_manager.utils import raise_not_found, request_deadline

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
logger = get_logger(__name__)


def _body_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Document a body that is parsed by json_body rather than by FastAPI."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


@router.get("", response_model=list[TaskResponse])
async def list_tasks(user_id: CurrentUserId, tasks: TaskRepo) -> list[TaskResponse]:
    """List the current user's tasks."""
    async with request_deadline(settings.read_timeout_seconds, "list_tasks"):
        rows = await tasks.list_by_owner(user_id)
    return [TaskResponse.model_validate(row) for row in rows]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(user_id: CurrentUserId, task_id: TaskId, tasks: TaskRepo) -> TaskResponse:
    """Get one task. Tasks owned by someone else are reported as missing."""
    async with request_deadline(settings.read_timeout_seconds, "get_task"):
        task = await tasks.get_by_id_for_owner(user_id, task_id)
    if task is None:
        raise_not_found("Task")
    return TaskResponse.model_validate(task)


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    openapi_extra=_body_schema(TaskCreate),
)
async def create_task(
    user_id: CurrentUserId,
    tasks: TaskRepo,
    data: Annotated[TaskCreate, Depends(json_body(TaskCreate))],
) -> TaskResponse:
    """Create a task owned by the current user."""
    task = Task(
        user_id=user_id,
        title=data.title,
        details=data.details,
        is_completed=data.is_completed,
        due_date=data.due_date,
    )
    async with request_deadline(settings.read_timeout_seconds, "create_task"):
        task = await tasks.create(task)
    logger.info("Task created", task_id=task.id)
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse, openapi_extra=_body_schema(TaskUpdate))
async def update_task(
    user_id: CurrentUserId,
    task_id: TaskId,
    tasks: TaskRepo,
    data: Annotated[TaskUpdate, Depends(json_body(TaskUpdate))],
) -> TaskResponse:
    """Apply the fields present in the body; everything else keeps its value."""
    changes = data.changes()
    async with request_deadline(settings.read_timeout_seconds, "update_task"):
        current = await tasks.get_by_id_for_owner(user_id, task_id)
        if current is None:
            raise_not_found("Task")

        updated = Task(
            id=current.id,
            user_id=current.user_id,
            title=changes.get("title", current.title),
            details=changes.get("details", current.details),
            is_completed=changes.get("is_completed", current.is_completed),
            due_date=changes.get("due_date", current.due_date),
            created_at=current.created_at,
            updated_at=current.updated_at,
        )
        # The row can vanish between read and write; report that as missing too
        if not await tasks.update(updated):
            raise_not_found("Task")

    logger.info("Task updated", task_id=task_id, fields=sorted(changes))
    return TaskResponse.model_validate(updated)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(user_id: CurrentUserId, task_id: TaskId, tasks: TaskRepo) -> Response:
    """Delete a task owned by the current user."""
    async with request_deadline(settings.read_timeout_seconds, "delete_task"):
        deleted = await tasks.delete_for_owner(user_id, task_id)
    if not deleted:
        raise_not_found("Task")
    logger.info("Task deleted", task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
