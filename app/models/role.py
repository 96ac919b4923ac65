"""
Role model — a closed set of roles with stable ordinal ids.

The row id *is* the ordinal, so "most privileged role" comparisons are
plain integer comparisons.
"""

from __future__ import annotations

from enum import IntEnum

from sqlalchemy import Column, Integer, String

from app.db.base import Base


class RoleName(IntEnum):
    USER = 0
    ADMIN = 1
    SUPPORT = 2
    SUPER_ADMIN = 3

    @property
    def label(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))

    @classmethod
    def parse(cls, value: str) -> RoleName | None:
        """Resolve ``"SuperAdmin"``, ``"super_admin"`` or ``"superadmin"``."""
        key = value.strip().replace("_", "").replace("-", "").replace(" ", "").lower()
        for member in cls:
            if member.label.lower() == key:
                return member
        return None


class Role(Base):
    __tablename__ = "roles"

    id: int = Column(Integer, primary_key=True, autoincrement=False)  # type: ignore[assignment]
    name: str = Column(String(50), unique=True, nullable=False)  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Role(id={self.id}, name={self.name!r})"
