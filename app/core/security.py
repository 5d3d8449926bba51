"""Password hashing and session token creation/verification."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

# Bcrypt cost (rounds).
BCRYPT_ROUNDS = 10

# Session tokens and the cookie that carries them live for one day.
SESSION_TTL = timedelta(days=1)
SESSION_COOKIE_NAME = "token"


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; longer inputs are truncated.
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash.
    A malformed stored hash raises ValueError; callers treat it as an internal error.
    """
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))


def issue_session_token(
    account_id: int,
    secret: str | None = None,
    ttl: timedelta = SESSION_TTL,
) -> str:
    """Create a signed session token carrying account_id, iat and exp."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "account_id": account_id,
        "iat": now,
        "exp": now + ttl,
    }
    if secret is None:
        secret = settings.resolve_signing_secret()
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str, secret: str | None = None) -> dict[str, Any]:
    """
    Decode and validate a session token; return payload (account_id, iat, exp).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    if secret is None:
        secret = settings.resolve_signing_secret()
    return jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
