"""Pydantic schemas for authentication."""

from typing import Annotated

from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator

from task_manager.schemas.user import UserResponse

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class RegisterRequest(BaseModel):
    """Schema for user registration."""

    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    email: EmailStr
    password: Annotated[str, Field(min_length=6)]

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password", mode="after")
    @classmethod
    def fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    """Schema for user login.

    email is a plain string: a malformed address simply matches no user, so
    it fails with the same 401 as any other bad credential.
    """

    email: str
    password: str

    @field_validator("email", mode="after")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class AuthResponse(BaseModel):
    """Schema for auth response - returns the JWT and the public user record."""

    token: str
    user: UserResponse
