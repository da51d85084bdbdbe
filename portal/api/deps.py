"""Request dependencies: DB-backed stores and the per-request authentication context."""

import logging
from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from portal.core.config import get_settings
from portal.core.database import get_db
from portal.core.errors import AuthenticationError, ForbiddenError
from portal.core.security import decode_session_cookie
from portal.models import User, UserRole
from portal.services.sessions import SessionStore
from portal.services.users import UserStore

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """Identity resolved for one request; anonymous when user is None."""

    user: User | None = None
    session_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> UserStore:
    return UserStore(db)


def get_session_store(db: Annotated[Session, Depends(get_db)]) -> SessionStore:
    return SessionStore(db)


def get_auth_context(
    request: Request,
    users: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> AuthContext:
    """
    Resolve the session cookie to a user. Missing, tampered or expired cookies,
    revoked sessions and deleted users all yield an anonymous context.
    """
    cookie = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if not cookie:
        return AuthContext()
    try:
        token = decode_session_cookie(cookie)
    except jwt.PyJWTError:
        logger.debug("Ignoring invalid session cookie")
        return AuthContext()

    row = sessions.get_active_session(token)
    if row is None:
        return AuthContext()
    user = users.get_user(row.user_id)
    if user is None:
        return AuthContext()
    return AuthContext(user=user, session_token=token)


def require_user(
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> User:
    """Dependency: require a logged-in user. Raises 401 when anonymous."""
    if ctx.user is None:
        raise AuthenticationError("Not authenticated")
    return ctx.user


def require_admin(
    user: Annotated[User, Depends(require_user)],
) -> User:
    """Dependency: require a logged-in admin. Raises 401 when anonymous, 403 for non-admin."""
    if user.role != UserRole.ADMIN.value:
        raise ForbiddenError("Admin access required", required_role=UserRole.ADMIN.value)
    return user
