"""
Issued access tokens — recorded on login for audit.

There is no server-side revocation: logout only drops the client cookie.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text, Uuid

from app.db.base import Base


class AccessToken(Base):
    __tablename__ = "access_tokens"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id = Column(  # type: ignore[assignment]
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token: str = Column(Text, nullable=False)  # type: ignore[assignment]
    expires_at: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
