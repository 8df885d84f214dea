"""Authentication API router."""

from fastapi import APIRouter, status

from task_manager.config import settings
from task_manager.deps import UserRepo
from task_manager.errors import DuplicateEmailError
from task_manager.logger import get_logger
from task_manager.repositories import UserDraft
from task_manager.schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from task_manager.security import create_access_token, hash_password, verify_password
from task_manager.utils import raise_conflict, raise_unauthorized, request_deadline

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["auth"],
    responses={400: {"model": ErrorResponse}},
)
logger = get_logger(__name__)

EMAIL_TAKEN = "Email already registered"
INVALID_CREDENTIALS = "Invalid email or password"


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def register(data: RegisterRequest, users: UserRepo) -> AuthResponse:
    """Register a new user with name, email and password."""
    async with request_deadline(settings.registration_timeout_seconds, "register"):
        if await users.exists_by_email(data.email):
            raise_conflict(EMAIL_TAKEN)

        draft = UserDraft(
            name=data.name,
            email=data.email,
            password_hash=hash_password(data.password),
        )
        try:
            user = await users.insert(draft)
        except DuplicateEmailError as exc:
            # Another request created the same email after our existence check
            raise_conflict(EMAIL_TAKEN, cause=exc)

    logger.info("User registered", user_id=user.id)
    token = create_access_token(user.id, user.token_version)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse, responses={401: {"model": ErrorResponse}})
async def login(data: LoginRequest, users: UserRepo) -> AuthResponse:
    """Login with email and password."""
    async with request_deadline(settings.read_timeout_seconds, "login"):
        user = await users.get_by_email(data.email)

    if user is None:
        logger.warning("Failed login attempt", reason="unknown_email")
        raise_unauthorized(INVALID_CREDENTIALS)

    if not verify_password(data.password, user.password_hash):
        logger.warning("Failed login attempt", reason="bad_password", user_id=user.id)
        raise_unauthorized(INVALID_CREDENTIALS)

    logger.info("Successful login", user_id=user.id)
    token = create_access_token(user.id, user.token_version)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))
