"""
Authentication flow: registration, credential checks, password reset and
email verification.

Callers own the login session itself (see SessionStore); these functions only
decide whether an identity may be established.
"""

import logging
from datetime import timedelta
from functools import lru_cache

from portal.core.errors import (
    AccountStatusError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from portal.core.security import (
    hash_password,
    needs_rehash,
    new_one_time_token,
    verify_password,
)
from portal.models import User, UserRole, UserStatus
from portal.schemas.auth import RegisterRequest
from portal.services.sessions import SessionStore, as_utc, utcnow
from portal.services.users import UserStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"

STATUS_MESSAGES = {
    UserStatus.DISABLED.value: "Account is disabled",
    UserStatus.SUSPENDED.value: "Account is suspended",
}


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    """Hash checked for unknown usernames so they cost as much as a wrong password."""
    return hash_password(new_one_time_token())


def register_user(users: UserStore, body: RegisterRequest) -> User:
    """Create an active, non-admin account. Raises ConflictError on duplicate username/email."""
    if users.get_user_by_username(body.username) is not None:
        raise ConflictError("Username already exists", field="username")
    if body.email and users.get_user_by_email(body.email) is not None:
        raise ConflictError("Email already exists", field="email")

    return users.create_user(
        username=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
        role=UserRole.USER.value,
        status=UserStatus.ACTIVE.value,
        email_verify_token=new_one_time_token() if body.email else None,
    )


def authenticate(users: UserStore, username: str, password: str) -> User:
    """
    Return the user for valid credentials.

    Unknown user and wrong password raise the same AuthenticationError. Account
    status is checked only after the password matched, so it is never revealed
    to someone without the password.
    """
    user = users.get_user_by_username(username)
    stored_hash = user.password_hash if user is not None else _dummy_password_hash()
    if not verify_password(password, stored_hash) or user is None:
        logger.info("Login failed for username=%s", username)
        raise AuthenticationError(INVALID_CREDENTIALS)

    if user.status != UserStatus.ACTIVE.value:
        logger.info("Login refused for user id=%s: status=%s", user.id, user.status)
        raise AccountStatusError(
            user.status,
            STATUS_MESSAGES.get(user.status, "Your account is not active"),
        )

    if needs_rehash(user.password_hash):
        users.update_user(user, password_hash=hash_password(password))
        logger.info("Upgraded legacy password hash for user id=%s", user.id)
    return user


def request_password_reset(users: UserStore, email: str, ttl_minutes: int) -> str | None:
    """
    Issue a reset token for the account with this email, if any.

    Returns the token (None when no account matched) so the caller can hand it
    to a delivery channel; API responses must not reveal which case occurred.
    """
    user = users.get_user_by_email(email)
    if user is None:
        return None
    token = new_one_time_token()
    users.update_user(
        user,
        password_reset_token=token,
        password_reset_expiry=utcnow() + timedelta(minutes=ttl_minutes),
    )
    logger.info("Password reset requested for user id=%s", user.id)
    return token


def reset_password(users: UserStore, sessions: SessionStore, token: str, new_password: str) -> User:
    """Set a new password from a valid reset token and log the user out everywhere."""
    user = users.get_user_by_reset_token(token)
    if (
        user is None
        or user.password_reset_expiry is None
        or as_utc(user.password_reset_expiry) <= utcnow()
    ):
        raise ValidationError("Invalid or expired password reset token")

    users.update_user(
        user,
        password_hash=hash_password(new_password),
        password_reset_token=None,
        password_reset_expiry=None,
    )
    sessions.delete_user_sessions(user.id)
    logger.info("Password reset completed for user id=%s", user.id)
    return user


def verify_email(users: UserStore, token: str) -> User:
    user = users.get_user_by_verify_token(token)
    if user is None:
        raise NotFoundError("Verification token")
    return users.update_user(user, email_verified=True, email_verify_token=None)
