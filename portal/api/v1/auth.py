"""Session login, registration, logout and account self-service endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from portal.api.deps import (
    AuthContext,
    get_auth_context,
    get_session_store,
    get_user_store,
)
from portal.core.config import get_settings
from portal.core.errors import AuthenticationError
from portal.core.security import encode_session_cookie
from portal.models import User
from portal.schemas.auth import (
    EmailVerificationRequest,
    LoginRequest,
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    RegisterRequest,
    UserEnvelope,
)
from portal.schemas.user import UserPublic
from portal.services import auth as auth_service
from portal.services.sessions import SessionStore, as_utc
from portal.services.users import UserStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _start_session(response: Response, sessions: SessionStore, user: User) -> None:
    """Create a server-side session for user and attach its signed cookie to response."""
    settings = get_settings()
    row = sessions.create_session(user.id, settings.SESSION_MAX_AGE_SECONDS)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=encode_session_cookie(row.token, as_utc(row.expires)),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def _envelope(user: User) -> UserEnvelope:
    return UserEnvelope(user=UserPublic.model_validate(user))


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    response: Response,
    users: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> UserEnvelope:
    """Create an account and log it in. 409 if the username or email is taken."""
    user = auth_service.register_user(users, body)
    _start_session(response, sessions, user)
    return _envelope(user)


@router.post("/login", response_model=UserEnvelope)
def login(
    body: LoginRequest,
    response: Response,
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
    users: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> UserEnvelope:
    """
    Authenticate with username and password and set the session cookie.
    401 for bad credentials, 403 for disabled or suspended accounts.
    """
    user = auth_service.authenticate(users, body.username, body.password)
    # Never reuse a session id presented before login.
    if ctx.session_token:
        sessions.delete_session(ctx.session_token)
    _start_session(response, sessions, user)
    return _envelope(user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> MessageResponse:
    if ctx.session_token:
        sessions.delete_session(ctx.session_token)
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out successfully")


@router.get("/user", response_model=UserEnvelope)
def current_user(
    ctx: Annotated[AuthContext, Depends(get_auth_context)],
) -> UserEnvelope:
    if ctx.user is None:
        raise AuthenticationError("Not authenticated")
    return _envelope(ctx.user)


@router.post(
    "/password-reset/request",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def password_reset_request(
    body: PasswordResetRequest,
    users: Annotated[UserStore, Depends(get_user_store)],
) -> MessageResponse:
    """Always answers the same way so account existence is not disclosed."""
    token = auth_service.request_password_reset(
        users, body.email, get_settings().PASSWORD_RESET_TTL_MINUTES
    )
    if token is not None and not get_settings().is_production:
        # No mail delivery; surface the token for local development only.
        logger.info("Password reset token for %s: %s", body.email, token)
    return MessageResponse(
        message="If an account with that email exists, a password reset link has been sent."
    )


@router.post("/password-reset", response_model=MessageResponse)
def password_reset(
    body: PasswordResetConfirm,
    users: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> MessageResponse:
    auth_service.reset_password(users, sessions, body.token, body.password)
    return MessageResponse(message="Password has been reset")


@router.post("/verify-email", response_model=UserEnvelope)
def verify_email(
    body: EmailVerificationRequest,
    users: Annotated[UserStore, Depends(get_user_store)],
) -> UserEnvelope:
    return _envelope(auth_service.verify_email(users, body.token))
