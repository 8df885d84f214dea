"""Liveness probe."""

from fastapi import APIRouter

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Report that the process is serving. Never touches storage."""
    return {"status": "ok"}
