"""Server-side login sessions: create, look up, revoke and prune."""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from portal.core.security import new_session_token
from portal.models import LoginSession

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; everything is stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SessionStore:
    """Session persistence on an explicit SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def create_session(self, user_id: int, max_age_seconds: int) -> LoginSession:
        row = LoginSession(
            token=new_session_token(),
            user_id=user_id,
            expires=utcnow() + timedelta(seconds=max_age_seconds),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def get_active_session(self, token: str) -> LoginSession | None:
        """Return the session for token, or None if unknown or expired (expired rows are removed)."""
        row = self.db.query(LoginSession).filter(LoginSession.token == token).first()
        if row is None:
            return None
        if as_utc(row.expires) <= utcnow():
            self.db.delete(row)
            self.db.commit()
            return None
        return row

    def delete_session(self, token: str) -> bool:
        deleted = (
            self.db.query(LoginSession)
            .filter(LoginSession.token == token)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted > 0

    def delete_user_sessions(self, user_id: int) -> int:
        deleted = (
            self.db.query(LoginSession)
            .filter(LoginSession.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted:
            logger.info("Revoked %s session(s) for user id=%s", deleted, user_id)
        return deleted

    def prune_expired(self) -> int:
        """Delete every expired session. Idempotent: safe to run repeatedly."""
        cutoff = utcnow()
        deleted = (
            self.db.query(LoginSession)
            .filter(LoginSession.expires <= cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted > 0:
            logger.info("Session prune: cutoff=%s, sessions_deleted=%s", cutoff.isoformat(), deleted)
        return deleted
