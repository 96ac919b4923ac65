"""
Store initialisation — table creation and the one-time role seed.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.db.base import Base
from app.models.access_token import AccessToken  # noqa: F401
from app.models.role import Role, RoleName
from app.models.user import User  # noqa: F401

logger = logging.getLogger(__name__)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")


async def seed_roles(session: AsyncSession) -> None:
    """Insert any missing role rows. Safe to run on every startup."""
    result = await session.execute(select(Role.id))
    existing = set(result.scalars().all())
    missing = [name for name in RoleName if int(name) not in existing]
    for name in missing:
        session.add(Role(id=int(name), name=name.label))
    if missing:
        await session.commit()
        logger.info("Seeded roles: %s", ", ".join(n.label for n in missing))
