"""Base schema classes and shared field helpers."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize to UTC. Naive values are taken to already be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class BaseResponse(BaseModel):
    """Base for all response schemas with from_attributes config."""

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Error envelope returned for every non-2xx response."""

    error: str
    details: str | None = None
