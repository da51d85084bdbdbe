"""Pydantic request/response schemas."""

from portal.schemas.auth import (
    EmailVerificationRequest,
    LoginRequest,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterRequest,
    UserEnvelope,
)
from portal.schemas.health import HealthResponse
from portal.schemas.user import UserCreate, UserPublic, UserStatusUpdate, UserWrite

__all__ = [
    "EmailVerificationRequest",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "PasswordResetConfirm",
    "PasswordResetRequest",
    "RegisterRequest",
    "UserCreate",
    "UserEnvelope",
    "UserPublic",
    "UserStatusUpdate",
    "UserWrite",
]
