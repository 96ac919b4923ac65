"""
Access-token issuance.

Signing and recording are separate failure modes: ``TokenSigningError``
means no usable token exists, ``TokenPersistenceError`` means a token was
signed but the audit row could not be written.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from jose.exceptions import JOSEError

from app.core.config import settings
from app.core.exceptions import TokenSigningError
from app.core.security import create_access_token
from app.models.user import User
from app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


def parse_lifetime(raw: str) -> timedelta:
    """Parse a lifetime in minutes; raises ``ValueError`` unless positive and finite."""
    minutes = float(raw)
    if not math.isfinite(minutes) or minutes <= 0:
        raise ValueError(f"lifetime must be a positive number of minutes, got {raw!r}")
    return timedelta(minutes=minutes)


class TokenIssuer:
    def __init__(self, repository: UserRepository, lifetime_minutes: str | None = None) -> None:
        self.repository = repository
        self.lifetime_minutes = (
            lifetime_minutes
            if lifetime_minutes is not None
            else settings.ACCESS_TOKEN_LIFETIME_MINUTES
        )

    def sign(self, user_id, email: str, issued_at: datetime | None = None) -> IssuedToken:
        try:
            lifetime = parse_lifetime(self.lifetime_minutes)
        except ValueError as exc:
            raise TokenSigningError("Access token lifetime is not a valid number of minutes") from exc
        try:
            token, expires_at = create_access_token(user_id, email, lifetime, issued_at=issued_at)
        except JOSEError as exc:
            raise TokenSigningError() from exc
        return IssuedToken(token=token, expires_at=expires_at)

    async def issue(self, user: User) -> IssuedToken:
        """Sign a token for *user* and record it."""
        issued = self.sign(user.id, user.email)
        await self.repository.save_access_token(user.id, issued.token, issued.expires_at)
        logger.info("Issued access token for user %s (expires %s)", user.id, issued.expires_at.isoformat())
        return issued
