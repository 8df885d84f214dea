"""Security utilities for JWT and password hashing."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt

from task_manager.config import settings
from task_manager.logger import get_logger

logger = get_logger(__name__)

REQUIRED_CLAIMS = ["user_id", "token_version", "iat", "exp"]


@dataclass(frozen=True)
class TokenClaims:
    """Verified contents of an access token."""

    user_id: str
    token_version: int
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt. The result embeds its own salt and cost."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or a password bcrypt refuses to process
        logger.warning("Password verification rejected input")
        return False


def _signing_key() -> str:
    problem = settings.jwt_secret_problem()
    if problem:
        raise RuntimeError(problem)
    return settings.jwt_secret  # type: ignore[return-value]


def create_access_token(
    user_id: str,
    token_version: int,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token carrying the user's current token version."""
    issued_at = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "user_id": user_id,
        "token_version": token_version,
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(to_encode, _signing_key(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims | None:
    """Decode and validate an access token.

    Only the configured algorithm is accepted, so unsigned ("none") and
    downgraded tokens fail signature verification. Callers must still compare
    token_version with the stored user.
    """
    try:
        payload = jwt.decode(
            token,
            _signing_key(),
            algorithms=[settings.jwt_algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        logger.debug("JWT token expired")
        return None
    except jwt.PyJWTError as exc:
        logger.warning(
            "JWT decode failed",
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return None

    user_id = payload["user_id"]
    token_version = payload["token_version"]
    if not isinstance(user_id, str) or not user_id:
        logger.warning("JWT carries an invalid user_id claim")
        return None
    if isinstance(token_version, bool) or not isinstance(token_version, int) or token_version < 0:
        logger.warning("JWT carries an invalid token_version claim")
        return None

    return TokenClaims(
        user_id=user_id,
        token_version=token_version,
        issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
    )
