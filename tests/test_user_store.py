"""Tests for mapping unique-constraint violations to ConflictError."""

import unittest
from types import SimpleNamespace

from sqlalchemy.exc import IntegrityError

from portal.services.users import _conflict_from_integrity_error


class _DriverError(Exception):
    def __init__(self, message: str, constraint_name: str | None = None) -> None:
        super().__init__(message)
        if constraint_name is not None:
            self.diag = SimpleNamespace(constraint_name=constraint_name)


def _integrity_error(message: str, constraint_name: str | None = None) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", {}, _DriverError(message, constraint_name))


class TestConflictFromIntegrityError(unittest.TestCase):
    def test_constraint_name_wins_over_message_text(self) -> None:
        exc = _integrity_error(
            'duplicate key value violates unique constraint "users_email_key"\n'
            "DETAIL:  Key (email)=(username@example.com) already exists.",
            constraint_name="users_email_key",
        )
        conflict = _conflict_from_integrity_error(exc)
        self.assertEqual(conflict.field, "email")
        self.assertEqual(conflict.message, "Email already exists")

    def test_username_constraint_name(self) -> None:
        exc = _integrity_error("duplicate key", constraint_name="ix_users_username")
        self.assertEqual(_conflict_from_integrity_error(exc).field, "username")

    def test_message_used_when_driver_has_no_constraint_name(self) -> None:
        exc = _integrity_error("UNIQUE constraint failed: users.email")
        self.assertEqual(_conflict_from_integrity_error(exc).field, "email")
        exc = _integrity_error("UNIQUE constraint failed: users.username")
        self.assertEqual(_conflict_from_integrity_error(exc).field, "username")

    def test_empty_constraint_name_falls_back_to_message(self) -> None:
        exc = _integrity_error("UNIQUE constraint failed: users.username", constraint_name="")
        self.assertEqual(_conflict_from_integrity_error(exc).field, "username")

    def test_unrecognised_violation(self) -> None:
        conflict = _conflict_from_integrity_error(_integrity_error("constraint failed"))
        self.assertEqual(conflict.message, "User already exists")
        self.assertEqual(conflict.status_code, 409)


if __name__ == "__main__":
    unittest.main()
