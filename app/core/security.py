"""
JWT access-token signing / verification and password hashing (bcrypt).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=settings.PASSWORD_HASH_ROUNDS,
)


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def dummy_verify_password() -> None:
    """Spend the same time as a real verify when there is no hash to check."""
    pwd_context.dummy_verify()


# ── JWT tokens ──────────────────────────────────────────────────────
def create_access_token(
    subject: str | Any,
    email: str,
    lifetime: timedelta,
    issued_at: datetime | None = None,
) -> tuple[str, datetime]:
    """Sign an access token and return ``(token, expires_at)``.

    The token carries issuer, audience, not-before (= issue time), expiry,
    the subject (user id) and the email claim.
    """
    now = issued_at or datetime.now(timezone.utc)
    expire = now + lifetime
    token = jwt.encode(
        {
            "iss": settings.JWT_ISSUER,
            "aud": settings.JWT_AUDIENCE,
            "sub": str(subject),
            "email": email,
            "iat": now,
            "nbf": now,
            "exp": expire,
        },
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    return token, expire


def decode_access_token(token: str) -> dict | None:
    """Return payload dict if the access token is valid, else ``None``.

    Signature, issuer, audience, not-before and expiry are all checked.
    """
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError:
        return None
