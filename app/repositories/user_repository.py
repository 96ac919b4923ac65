"""
User repository — the only layer that talks to the relational store.

The session is passed in explicitly; the repository never opens its own.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, TokenPersistenceError, UserNotFoundError
from app.models.access_token import AccessToken
from app.models.role import Role, RoleName
from app.models.user import User
from app.services.user_query import UserQuery

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ── Reads ───────────────────────────────────────────────────────
    async def get_by_id(self, user_id: uuid.UUID) -> User:
        result = await self.session.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError()
        return user

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, exclude_user_id: uuid.UUID | None = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None

    async def get_role(self, role_name: RoleName) -> Role | None:
        return await self.session.get(Role, int(role_name))

    async def list_users(self, query: UserQuery) -> list[User]:
        result = await self.session.execute(query.statement())
        return list(result.scalars().all())

    async def count_users(self, query: UserQuery) -> int:
        result = await self.session.execute(query.count_statement())
        return int(result.scalar_one())

    # ── Writes ──────────────────────────────────────────────────────
    async def _commit_user(self, user: User, conflict_message: str = "Email is not unique") -> User:
        """Commit and reload *user*; a constraint violation becomes a conflict."""
        # Rollback expires the instance, so nothing on it may be read afterwards
        label = user.email
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            logger.warning("Integrity error while saving user %s: %s", label, exc.orig)
            raise ConflictError(conflict_message) from exc
        await self.session.refresh(user)
        return user

    async def create_user(
        self,
        name: str,
        email: str,
        hashed_password: str,
        age: int,
        roles: list[Role],
    ) -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            age=age,
            roles=list(roles),
        )
        self.session.add(user)
        return await self._commit_user(user)

    async def update_user(
        self,
        user: User,
        name: str,
        age: int,
        email: str,
        hashed_password: str,
    ) -> User:
        user.name = name
        user.age = age
        user.email = email
        user.hashed_password = hashed_password
        return await self._commit_user(user)

    async def add_role(self, user: User, role: Role) -> User:
        if any(existing.id == role.id for existing in user.roles):
            return user
        user.roles.append(role)
        return await self._commit_user(user, conflict_message=f"Role '{role.name}' is already assigned")

    async def delete_user(self, user: User) -> None:
        """Delete the user, its recorded tokens and its role associations."""
        await self.session.execute(delete(AccessToken).where(AccessToken.user_id == user.id))
        await self.session.delete(user)
        await self.session.commit()

    async def save_access_token(self, user_id: uuid.UUID, token: str, expires_at: datetime) -> AccessToken:
        record = AccessToken(user_id=user_id, token=token, expires_at=expires_at)
        try:
            self.session.add(record)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise TokenPersistenceError() from exc
        return record
