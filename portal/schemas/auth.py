"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, EmailStr, Field

from portal.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from portal.schemas.user import UserPublic


class RegisterRequest(BaseModel):
    """Self-service registration payload."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr | None = None
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class LoginRequest(BaseModel):
    """Credentials for login. Length rules are not enforced here so bad input reads as bad credentials."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)


class UserEnvelope(BaseModel):
    """Response wrapping a single sanitized user."""

    user: UserPublic


class MessageResponse(BaseModel):
    message: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class EmailVerificationRequest(BaseModel):
    token: str = Field(..., min_length=1)
