"""Password hashing and session cookie signing/verification."""

import hashlib
import hmac
import logging
import secrets
from datetime import UTC, datetime
from typing import Any

import bcrypt
import jwt

from portal.core.config import settings

logger = logging.getLogger(__name__)

# scrypt cost parameters; stored hashes are "<64-byte key hex>.<16-byte salt hex>".
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_LEN = 64
SALT_BYTES = 16

# Hashes created before the move to scrypt.
LEGACY_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")

SESSION_COOKIE_ALGORITHM = "HS256"

USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 100


def _scrypt(plain_password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        plain_password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_KEY_LEN,
    )


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    salt = secrets.token_hex(SALT_BYTES)
    return f"{_scrypt(plain_password, salt).hex()}.{salt}"


def is_legacy_hash(stored: str) -> bool:
    return stored.startswith(LEGACY_BCRYPT_PREFIXES)


def needs_rehash(stored: str) -> bool:
    """True when the stored hash is not in the current scrypt format."""
    return is_legacy_hash(stored)


def verify_password(plain_password: str, stored: str) -> bool:
    """
    Verify a plain password against a stored hash.

    Returns False (never raises) for malformed stored values.
    """
    if not stored:
        return False
    if is_legacy_hash(stored):
        # bcrypt has a 72-byte limit.
        try:
            return bcrypt.checkpw(plain_password.encode("utf-8")[:72], stored.encode("utf-8"))
        except (ValueError, TypeError):
            logger.warning("Stored bcrypt hash is malformed")
            return False

    hashed, sep, salt = stored.partition(".")
    if not sep or not hashed or not salt:
        logger.warning("Stored password hash is malformed (missing hash or salt)")
        return False
    try:
        expected = bytes.fromhex(hashed)
    except ValueError:
        logger.warning("Stored password hash is not valid hex")
        return False
    if len(expected) != SCRYPT_KEY_LEN:
        logger.warning(
            "Stored password hash length mismatch: %s vs %s", len(expected), SCRYPT_KEY_LEN
        )
        return False
    return hmac.compare_digest(expected, _scrypt(plain_password, salt))


def new_session_token() -> str:
    """Opaque random token identifying a server-side session row."""
    return secrets.token_urlsafe(32)


def new_one_time_token() -> str:
    """Random token for email verification and password reset links."""
    return secrets.token_urlsafe(32)


def encode_session_cookie(token: str, expires_at: datetime) -> str:
    """Sign the session token into the cookie value; the token itself stays server-side authoritative."""
    payload: dict[str, Any] = {
        "sid": token,
        "exp": expires_at,
        "iat": datetime.now(UTC),
    }
    return jwt.encode(
        payload,
        settings.SESSION_SECRET.get_secret_value(),
        algorithm=SESSION_COOKIE_ALGORITHM,
    )


def decode_session_cookie(value: str) -> str:
    """
    Verify the cookie signature and expiry and return the session token.
    Raises jwt.PyJWTError on invalid, tampered or expired cookies.
    """
    payload = jwt.decode(
        value,
        settings.SESSION_SECRET.get_secret_value(),
        algorithms=[SESSION_COOKIE_ALGORITHM],
    )
    sid = payload.get("sid")
    if not isinstance(sid, str) or not sid:
        raise jwt.InvalidTokenError("Session cookie has no session id")
    return sid
