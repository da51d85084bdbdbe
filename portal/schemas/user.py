"""Request/response schemas for user management endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from portal.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from portal.models.user import UserRole, UserStatus


class UserPublic(BaseModel):
    """
    User as returned by the API: no password hash and no one-time tokens.
    Keys are camelCase (emailVerified, createdAt, updatedAt).
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: int
    username: str
    email: str | None = None
    role: str
    status: str
    email_verified: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserWrite(BaseModel):
    """Fields accepted when an admin replaces a user's profile (PUT)."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr | None = None
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class UserCreate(UserWrite):
    """Admin-side creation; role and status may be chosen up front."""

    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE


class UserStatusUpdate(BaseModel):
    status: UserStatus
