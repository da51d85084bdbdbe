"""SQLAlchemy ORM models."""

from portal.models.base import Base
from portal.models.session import LoginSession
from portal.models.user import User, UserRole, UserStatus

__all__ = ["Base", "LoginSession", "User", "UserRole", "UserStatus"]
