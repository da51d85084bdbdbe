"""ORM-backed user storage. All writes commit; unique violations surface as ConflictError."""

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core.errors import ConflictError
from portal.models import User, UserRole, UserStatus

logger = logging.getLogger(__name__)

# Columns update_user() may change; everything else goes through a dedicated method.
UPDATABLE_FIELDS = frozenset(
    {
        "username",
        "email",
        "password_hash",
        "role",
        "status",
        "email_verified",
        "email_verify_token",
        "password_reset_token",
        "password_reset_expiry",
    }
)


def _conflict_from_integrity_error(exc: IntegrityError) -> ConflictError:
    """Translate a unique-constraint violation into a ConflictError naming the field.

    psycopg2 reports the violated constraint by name (``ix_users_username``,
    ``users_email_key``); its message text can quote user values, so the name wins.
    Drivers without it (SQLite) only name the column in the message.
    """
    diag = getattr(exc.orig, "diag", None)
    constraint = (getattr(diag, "constraint_name", None) or "").lower()
    if "username" in constraint:
        return ConflictError("Username already exists", field="username")
    if "email" in constraint:
        return ConflictError("Email already exists", field="email")
    text = str(exc.orig).lower()
    if "username" in text:
        return ConflictError("Username already exists", field="username")
    if "email" in text:
        return ConflictError("Email already exists", field="email")
    return ConflictError("User already exists")


class UserStore:
    """User persistence on an explicit SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_user(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def get_user_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def get_user_by_reset_token(self, token: str) -> User | None:
        return self.db.query(User).filter(User.password_reset_token == token).first()

    def get_user_by_verify_token(self, token: str) -> User | None:
        return self.db.query(User).filter(User.email_verify_token == token).first()

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def create_user(
        self,
        username: str,
        password_hash: str,
        email: str | None = None,
        role: str = UserRole.USER.value,
        status: str = UserStatus.ACTIVE.value,
        email_verified: bool = False,
        email_verify_token: str | None = None,
    ) -> User:
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            role=role,
            status=status,
            email_verified=email_verified,
            email_verify_token=email_verify_token,
        )
        self.db.add(user)
        self._commit()
        self.db.refresh(user)
        logger.info("Created user id=%s username=%s role=%s", user.id, user.username, user.role)
        return user

    def update_user(self, user: User, **fields: Any) -> User:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update user fields: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(user, name, value)
        self._commit()
        self.db.refresh(user)
        return user

    def update_user_status(self, user: User, status: str) -> User:
        return self.update_user(user, status=status)

    def delete_user(self, user: User) -> None:
        """Delete the user; their sessions go with them."""
        user_id = user.id
        self.db.delete(user)
        self.db.commit()
        logger.info("Deleted user id=%s", user_id)

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise _conflict_from_integrity_error(exc) from exc
