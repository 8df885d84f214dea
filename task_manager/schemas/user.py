"""Pydantic schemas for users."""

from datetime import datetime

from pydantic import field_validator

from task_manager.schemas.base import BaseResponse, as_utc


class UserResponse(BaseResponse):
    """Public view of a user. The password hash is deliberately absent."""

    id: str
    name: str
    email: str
    token_version: int
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def ensure_timezone_aware(cls, v: datetime) -> datetime:
        """Ensure datetime fields are timezone-aware."""
        return as_utc(v)
