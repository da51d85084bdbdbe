"""
Create a user (e.g. the first admin). Run from project root:
  python -m portal.scripts.create_user USERNAME PASSWORD [role] [--email EMAIL]
Example:
  python -m portal.scripts.create_user admin your-secure-password admin
"""
import argparse
import sys

from portal.core.database import SessionLocal
from portal.core.errors import ConflictError
from portal.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    hash_password,
)
from portal.models import UserRole
from portal.services.users import UserStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a portal user without going through registration.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.USER.value,
        choices=[r.value for r in UserRole],
    )
    parser.add_argument("--email", default=None, help="Optional email address")
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN):
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        users = UserStore(db)
        if users.get_user_by_username(username):
            print(f"User '{username}' already exists.", file=sys.stderr)
            return 1
        try:
            users.create_user(
                username=username,
                email=args.email,
                password_hash=hash_password(args.password),
                role=args.role,
                email_verified=args.email is not None,
            )
        except ConflictError as e:
            print(e.message, file=sys.stderr)
            return 1
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
