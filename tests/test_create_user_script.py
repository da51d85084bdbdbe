"""Tests for the create_user CLI."""

import unittest
from contextlib import redirect_stderr, redirect_stdout
from io import StringIO

from portal.core.database import SessionLocal, engine
from portal.core.security import verify_password
from portal.models import Base, User
from portal.scripts.create_user import main


def _run(*argv: str) -> tuple[int, str, str]:
    out, err = StringIO(), StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        code = main(list(argv))
    return code, out.getvalue(), err.getvalue()


class TestCreateUserScript(unittest.TestCase):
    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)

    def tearDown(self) -> None:
        Base.metadata.drop_all(bind=engine)

    def test_creates_admin_with_hashed_password(self) -> None:
        code, out, _ = _run("admin", "s3cure-password", "admin", "--email", "admin@example.com")
        self.assertEqual(code, 0)
        self.assertIn("Created user 'admin' with role 'admin'", out)
        with SessionLocal() as db:
            user = db.query(User).filter(User.username == "admin").one()
            self.assertEqual(user.role, "admin")
            self.assertTrue(user.email_verified)
            self.assertTrue(verify_password("s3cure-password", user.password_hash))

    def test_duplicate_username_fails(self) -> None:
        self.assertEqual(_run("admin", "s3cure-password")[0], 0)
        code, _, err = _run("admin", "another-password")
        self.assertEqual(code, 1)
        self.assertIn("already exists", err)

    def test_length_checks(self) -> None:
        self.assertEqual(_run("ab", "s3cure-password")[0], 1)
        self.assertEqual(_run("admin", "short")[0], 1)


if __name__ == "__main__":
    unittest.main()
