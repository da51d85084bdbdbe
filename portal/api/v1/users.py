"""User management endpoints (admin only, except reading a single user)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from portal.api.deps import get_session_store, get_user_store, require_admin, require_user
from portal.core.errors import NotFoundError
from portal.core.security import hash_password, new_one_time_token
from portal.models import User, UserStatus
from portal.schemas.user import UserCreate, UserPublic, UserStatusUpdate, UserWrite
from portal.services.sessions import SessionStore
from portal.services.users import UserStore

router = APIRouter()


def _get_or_404(users: UserStore, user_id: int) -> User:
    user = users.get_user(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


@router.get("", response_model=list[UserPublic])
def list_users(
    _admin: Annotated[User, Depends(require_admin)],
    users: Annotated[UserStore, Depends(get_user_store)],
) -> list[UserPublic]:
    return [UserPublic.model_validate(u) for u in users.list_users()]


@router.get("/{user_id}", response_model=UserPublic)
def get_user(
    user_id: int,
    _user: Annotated[User, Depends(require_user)],
    users: Annotated[UserStore, Depends(get_user_store)],
) -> UserPublic:
    return UserPublic.model_validate(_get_or_404(users, user_id))


@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    _admin: Annotated[User, Depends(require_admin)],
    users: Annotated[UserStore, Depends(get_user_store)],
) -> UserPublic:
    """Create a user directly (no session is started). 409 on duplicate username or email."""
    user = users.create_user(
        username=body.username,
        email=body.email,
        password_hash=hash_password(body.password),
        role=body.role.value,
        status=body.status.value,
    )
    return UserPublic.model_validate(user)


@router.put("/{user_id}", response_model=UserPublic)
def update_user(
    user_id: int,
    body: UserWrite,
    _admin: Annotated[User, Depends(require_admin)],
    users: Annotated[UserStore, Depends(get_user_store)],
) -> UserPublic:
    user = _get_or_404(users, user_id)
    fields = {
        "username": body.username,
        "email": body.email,
        "password_hash": hash_password(body.password),
    }
    # A changed address has not been verified yet.
    if body.email != user.email:
        fields["email_verified"] = False
        fields["email_verify_token"] = new_one_time_token() if body.email else None
    updated = users.update_user(user, **fields)
    return UserPublic.model_validate(updated)


@router.patch("/{user_id}/status", response_model=UserPublic)
def update_user_status(
    user_id: int,
    body: UserStatusUpdate,
    _admin: Annotated[User, Depends(require_admin)],
    users: Annotated[UserStore, Depends(get_user_store)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> UserPublic:
    """Change account status; leaving `active` logs the user out everywhere."""
    user = _get_or_404(users, user_id)
    updated = users.update_user_status(user, body.status.value)
    if body.status != UserStatus.ACTIVE:
        sessions.delete_user_sessions(updated.id)
    return UserPublic.model_validate(updated)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    _admin: Annotated[User, Depends(require_admin)],
    users: Annotated[UserStore, Depends(get_user_store)],
) -> Response:
    users.delete_user(_get_or_404(users, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
