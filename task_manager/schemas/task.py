"""Pydantic schemas for tasks."""

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from task_manager.schemas.base import BaseResponse, as_utc

Title = Annotated[str, Field(min_length=1, max_length=255)]


class TaskCreate(BaseModel):
    """Schema for creating a task. Absent optional fields mean "not provided"."""

    model_config = ConfigDict(extra="ignore")

    title: Title
    details: str | None = None
    is_completed: bool = False
    due_date: datetime | None = None

    @field_validator("title", mode="after")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v

    @field_validator("due_date", mode="after")
    @classmethod
    def due_date_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class TaskUpdate(BaseModel):
    """Schema for a partial update.

    Only fields present in the request body are applied; check
    model_fields_set (or dump with exclude_unset) to tell "absent" from
    "explicit null". Null clears details and due_date but is rejected for
    title and is_completed.
    """

    model_config = ConfigDict(extra="ignore")

    title: Title | None = None
    details: str | None = None
    is_completed: bool | None = None
    due_date: datetime | None = None

    @field_validator("title", "is_completed", mode="after")
    @classmethod
    def reject_null(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        if info.field_name == "title" and not v.strip():
            raise ValueError("title must not be blank")
        return v

    @field_validator("due_date", mode="after")
    @classmethod
    def due_date_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)

    def changes(self) -> dict[str, Any]:
        """Fields the client actually sent, including explicit nulls."""
        return self.model_dump(exclude_unset=True)


class TaskResponse(BaseResponse):
    """Schema for task response."""

    id: int
    user_id: str
    title: str
    details: str | None = None
    is_completed: bool
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("due_date", "created_at", "updated_at", mode="after")
    @classmethod
    def ensure_timezone_aware(cls, v: datetime | None) -> datetime | None:
        """Ensure datetime fields are timezone-aware."""
        return as_utc(v)
