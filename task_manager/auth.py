"""Authentication helpers for request-scoped user context."""

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from task_manager.logger import get_logger
from task_manager.providers import get_user_repository
from task_manager.repositories import UserRepository
from task_manager.security import decode_access_token
from task_manager.utils import raise_unauthorized

logger = get_logger(__name__)

# auto_error=False so a missing header is answered with 401 by us, not 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    users: UserRepository = Depends(get_user_repository),
) -> str:
    """Resolve the current user ID from the bearer token.

    The token's version must match the stored user's token_version, so
    bumping the counter revokes every token issued before.
    """
    if credentials is None:
        raise_unauthorized("Missing bearer token")

    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise_unauthorized("Invalid or expired token")

    user = await users.get_by_id(claims.user_id)
    if user is None:
        logger.warning("Token subject no longer exists", user_id=claims.user_id)
        raise_unauthorized("Invalid or expired token")

    if user.token_version != claims.token_version:
        logger.info(
            "Token version mismatch",
            user_id=user.id,
            token_version=claims.token_version,
            current_version=user.token_version,
        )
        raise_unauthorized("Invalid or expired token")

    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user.id
