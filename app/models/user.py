"""
User model — account data and its many-to-many role association.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (CheckConstraint, Column, DateTime, ForeignKey, Integer,
                        String, Table, Uuid)
from sqlalchemy.orm import relationship

from app.db.base import Base

# Composite primary key: a user holds a given role at most once.
user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (CheckConstraint("age >= 0", name="ck_users_age_non_negative"),)

    id: uuid.UUID = Column(Uuid, primary_key=True, default=uuid.uuid4)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False, index=True)  # type: ignore[assignment]
    age: int = Column(Integer, nullable=False, default=0)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    # Always eagerly loaded with the user.
    roles = relationship("Role", secondary=user_roles, lazy="selectin", order_by="Role.id")

    def __repr__(self) -> str:
        return f"User(id={self.id}, name={self.name!r}, email={self.email!r})"
