"""Tests for portal.services.sessions: expiry handling, revocation and pruning."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock, patch

from portal import prune_sessions
from portal.core.database import SessionLocal, engine
from portal.core.security import hash_password
from portal.models import Base, LoginSession
from portal.services.sessions import SessionStore, utcnow
from portal.services.users import UserStore


class TestPruneExpiredMocked(unittest.TestCase):
    """prune_expired issues one bulk delete and commits."""

    def test_returns_zero_when_nothing_expired(self) -> None:
        db = MagicMock()
        db.query.return_value.filter.return_value.delete.return_value = 0
        self.assertEqual(SessionStore(db).prune_expired(), 0)
        db.commit.assert_called_once()

    def test_returns_deleted_count(self) -> None:
        db = MagicMock()
        db.query.return_value.filter.return_value.delete.return_value = 3
        self.assertEqual(SessionStore(db).prune_expired(), 3)
        db.add.assert_not_called()


class TestSessionStoreDatabase(unittest.TestCase):
    """SessionStore against the in-memory SQLite schema."""

    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()
        self.store = SessionStore(self.db)
        self.user = UserStore(self.db).create_user(
            username="alice", password_hash=hash_password("Passw0rd!")
        )

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def _expire(self, row: LoginSession) -> None:
        row.expires = utcnow() - timedelta(seconds=1)
        self.db.commit()

    def test_active_session_found(self) -> None:
        row = self.store.create_session(self.user.id, 3600)
        found = self.store.get_active_session(row.token)
        self.assertIsNotNone(found)
        self.assertEqual(found.user_id, self.user.id)

    def test_expired_session_is_absent_and_removed(self) -> None:
        row = self.store.create_session(self.user.id, 3600)
        token = row.token
        self._expire(row)
        self.assertIsNone(self.store.get_active_session(token))
        self.assertEqual(self.db.query(LoginSession).count(), 0)

    def test_unknown_token(self) -> None:
        self.assertIsNone(self.store.get_active_session("missing"))

    def test_delete_session(self) -> None:
        token = self.store.create_session(self.user.id, 3600).token
        self.assertTrue(self.store.delete_session(token))
        self.assertFalse(self.store.delete_session(token))

    def test_delete_user_sessions(self) -> None:
        for _ in range(3):
            self.store.create_session(self.user.id, 3600)
        self.assertEqual(self.store.delete_user_sessions(self.user.id), 3)
        self.assertEqual(self.db.query(LoginSession).count(), 0)

    def test_prune_only_removes_expired(self) -> None:
        keep = self.store.create_session(self.user.id, 3600)
        old = self.store.create_session(self.user.id, 3600)
        self._expire(old)
        self.assertEqual(self.store.prune_expired(), 1)
        self.assertEqual(self.store.prune_expired(), 0)
        remaining = [r.token for r in self.db.query(LoginSession).all()]
        self.assertEqual(remaining, [keep.token])

    def test_deleting_user_removes_sessions(self) -> None:
        self.store.create_session(self.user.id, 3600)
        self.store.create_session(self.user.id, 3600)
        UserStore(self.db).delete_user(self.user)
        self.assertEqual(self.db.query(LoginSession).count(), 0)


class TestPruneSessionsCli(unittest.TestCase):
    def test_success_exit_code(self) -> None:
        db = MagicMock()
        db.query.return_value.filter.return_value.delete.return_value = 2
        with patch.object(prune_sessions, "SessionLocal", return_value=db):
            self.assertEqual(prune_sessions.main(), 0)
        db.close.assert_called_once()

    def test_failure_exit_code(self) -> None:
        db = MagicMock()
        db.query.side_effect = RuntimeError("database down")
        with patch.object(prune_sessions, "SessionLocal", return_value=db):
            self.assertEqual(prune_sessions.main(), 1)
        db.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
