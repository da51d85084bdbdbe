"""ORM model for application users (auth, account status and RBAC)."""

from enum import StrEnum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from portal.models.base import Base


class UserRole(StrEnum):
    USER = "user"
    ADMIN = "admin"


class UserStatus(StrEnum):
    ACTIVE = "active"
    DISABLED = "disabled"
    SUSPENDED = "suspended"


class User(Base):
    """
    User account for session authentication and role-based access control.

    password_hash holds "<scrypt key hex>.<salt hex>" (or a legacy bcrypt hash
    until the user's next login); the plain password is never stored.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=UserRole.USER.value)
    status = Column(String(32), nullable=False, default=UserStatus.ACTIVE.value)
    email_verified = Column(Boolean, nullable=False, default=False)
    email_verify_token = Column(String(255), nullable=True, index=True)
    password_reset_token = Column(String(255), nullable=True, index=True)
    password_reset_expiry = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    sessions = relationship(
        "LoginSession",
        back_populates="user",
        cascade="all, delete-orphan",
    )
