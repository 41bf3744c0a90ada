"""
Credentials and tokens.

Passwords are stored as bcrypt hashes (cost from ``BCRYPT_ROUNDS``, never
below 10). Access tokens are HS256 JWTs carrying the caller's tenant claims
and expire after ``ACCESS_TOKEN_EXPIRE_MINUTES`` (seven days by default).
Invitation tokens are opaque random strings, unrelated to JWTs.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from notesaas.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

# 32 random bytes, 43 characters once base64url encoded
INVITE_TOKEN_BYTES = 32

ACCESS_TOKEN_TYPE = "access"


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    SQLite drops tzinfo on round-trip; everything is stored as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time comparison of a candidate password with a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: str | dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign an access token.

    ``subject`` is either a bare user ID or the full claim set
    (``sub``, ``tenant_id``, ``tenant_slug``, ``role``, ...). Expiry,
    issue time and token type are added here and override anything passed in.
    """
    claims = dict(subject) if isinstance(subject, dict) else {"sub": str(subject)}

    issued_at = utcnow()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims["iat"] = issued_at
    claims["exp"] = issued_at + lifetime
    claims["type"] = ACCESS_TOKEN_TYPE

    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict[str, Any]:
    """
    Verify signature and expiry, returning the claims.

    Raises:
        JWTError: If the token is malformed, tampered with or expired
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        logger.debug("access token rejected: %s", e)
        raise


def generate_invite_token() -> str:
    """Unguessable, URL-safe invitation token."""
    return secrets.token_urlsafe(INVITE_TOKEN_BYTES)
