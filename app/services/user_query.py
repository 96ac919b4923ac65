"""
User listing query plan — pagination, sorting and free-text filtering.

``UserQuery.from_params`` validates and normalises raw listing parameters
into an immutable plan; ``statement()`` renders it as a SQLAlchemy select.
Invalid parameters are rejected here, before any storage access.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import Select, String, cast, func, or_, select
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import InvalidInputError
from app.models.user import User, user_roles

logger = logging.getLogger(__name__)

ORDERABLE_FIELDS = ("id", "name", "email", "age", "role")
DEFAULT_ORDER_FIELD = "name"


def _escape_like(value: str) -> str:
    """Escape SQL LIKE metacharacters to prevent wildcard injection."""
    return value.replace("\\", "\\\\").replace("%", r"\%").replace("_", r"\_")


def _max_role_ordinal():
    """Correlated subquery: highest role ordinal held by the user (-1 if none)."""
    return (
        select(func.coalesce(func.max(user_roles.c.role_id), -1))
        .where(user_roles.c.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )


@dataclass(frozen=True)
class UserQuery:
    limit: int
    offset: int
    order_by: str = DEFAULT_ORDER_FIELD
    descending: bool = False
    filter_text: str | None = None

    @classmethod
    def from_params(
        cls,
        limit: int = 0,
        offset: int = 0,
        order_by: str | None = None,
        sort: str | None = None,
        filter_text: str | None = None,
    ) -> UserQuery:
        """Build a plan from listing parameters.

        ``limit == 0`` selects the default page size rather than an empty
        page, and a limit above ``MAX_PAGE_SIZE`` is capped to it. Unknown
        ``order_by`` values fall back to ordering by name and unknown
        ``sort`` directions fall back to ascending.
        """
        errors = []
        if limit < 0:
            errors.append({"field": "limit", "message": "limit must not be negative"})
        if offset < 0:
            errors.append({"field": "offset", "message": "offset must not be negative"})
        if errors:
            raise InvalidInputError("Invalid limit or offset", errors=errors)
        if limit > settings.MAX_PAGE_SIZE:
            logger.info("limit %d capped at %d", limit, settings.MAX_PAGE_SIZE)
            limit = settings.MAX_PAGE_SIZE

        field = (order_by or "").strip().lower()
        if field not in ORDERABLE_FIELDS:
            if field:
                logger.info("Unknown order_by %r, ordering by %s", order_by, DEFAULT_ORDER_FIELD)
            field = DEFAULT_ORDER_FIELD

        direction = (sort or "asc").strip().lower()
        if direction not in ("asc", "desc"):
            logger.warning("Unknown sort direction %r, using ascending", sort)
            direction = "asc"

        # Surrounding spaces are part of the substring; an all-blank filter is no filter
        text = filter_text if filter_text and filter_text.strip() else None

        return cls(
            limit=limit or settings.DEFAULT_PAGE_SIZE,
            offset=offset,
            order_by=field,
            descending=direction == "desc",
            filter_text=text,
        )

    # ── Rendering ───────────────────────────────────────────────────
    def _filter_clause(self):
        if not self.filter_text:
            return None
        pattern = f"%{_escape_like(self.filter_text)}%"
        return or_(
            User.name.ilike(pattern, escape="\\"),
            User.email.ilike(pattern, escape="\\"),
            cast(User.age, String).ilike(pattern, escape="\\"),
        )

    def _order_key(self):
        if self.order_by == "role":
            return _max_role_ordinal()
        return getattr(User, self.order_by)

    def statement(self) -> Select:
        stmt = select(User).options(selectinload(User.roles))
        clause = self._filter_clause()
        if clause is not None:
            stmt = stmt.where(clause)

        key = self._order_key()
        if self.descending:
            stmt = stmt.order_by(key.desc(), User.id.desc())
        else:
            stmt = stmt.order_by(key.asc(), User.id.asc())

        return stmt.offset(self.offset).limit(self.limit)

    def count_statement(self) -> Select:
        stmt = select(func.count()).select_from(User)
        clause = self._filter_clause()
        if clause is not None:
            stmt = stmt.where(clause)
        return stmt
