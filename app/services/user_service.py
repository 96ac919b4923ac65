"""
User service — registration, login, profile management, roles and listing.

Composes validation, the repository and the token issuer. Every failure is
raised as an ``AppError`` subclass; the HTTP layer maps it to a status.
"""

from __future__ import annotations

import logging
import uuid

from app.core.exceptions import InvalidCredentialsError, RoleNotFoundError
from app.core.security import (dummy_verify_password, get_password_hash,
                               verify_password)
from app.models.role import RoleName
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.token_issuer import IssuedToken, TokenIssuer
from app.services.user_query import UserQuery
from app.services.validation import RegistrationRules, UpdateRules, validate_user_data

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repository: UserRepository, token_issuer: TokenIssuer | None = None) -> None:
        self.repository = repository
        self.token_issuer = token_issuer or TokenIssuer(repository)

    async def register(self, name: str, email: str, password: str, age: int) -> User:
        """Create a user holding the default ``User`` role."""
        result = await validate_user_data(email, password, RegistrationRules(self.repository))
        result.raise_for_errors()

        default_role = await self.repository.get_role(RoleName.USER)
        user = await self.repository.create_user(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            age=age,
            roles=[default_role] if default_role is not None else [],
        )
        if default_role is None:
            logger.warning("Role table is not seeded; user %s registered without roles", user.id)
        logger.info("Registered user %s", user.id)
        return user

    async def login(self, email: str, password: str) -> tuple[User, IssuedToken]:
        user = await self.repository.get_by_email(email)
        if user is None:
            dummy_verify_password()
            raise InvalidCredentialsError()
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()
        issued = await self.token_issuer.issue(user)
        return user, issued

    async def get_user(self, user_id: uuid.UUID) -> User:
        return await self.repository.get_by_id(user_id)

    async def update_user(
        self,
        user_id: uuid.UUID,
        name: str,
        age: int,
        email: str,
        password: str,
    ) -> User:
        """Overwrite every field of the user."""
        user = await self.repository.get_by_id(user_id)
        result = await validate_user_data(email, password, UpdateRules(self.repository, user_id))
        result.raise_for_errors()

        user = await self.repository.update_user(
            user,
            name=name,
            age=age,
            email=email,
            hashed_password=get_password_hash(password),
        )
        logger.info("Updated user %s", user_id)
        return user

    async def delete_user(self, user_id: uuid.UUID) -> User:
        user = await self.repository.get_by_id(user_id)
        await self.repository.delete_user(user)
        logger.info("Deleted user %s", user_id)
        return user

    async def add_role(self, user_id: uuid.UUID, role_name: str) -> User:
        user = await self.repository.get_by_id(user_id)
        name = RoleName.parse(role_name)
        role = await self.repository.get_role(name) if name is not None else None
        if role is None:
            raise RoleNotFoundError(f"Role '{role_name}' is not found")
        user = await self.repository.add_role(user, role)
        logger.info("User %s now holds roles %s", user_id, [r.name for r in user.roles])
        return user

    async def list_users(self, query: UserQuery) -> tuple[list[User], int]:
        """Return one page of users and the total number matching the filter."""
        users = await self.repository.list_users(query)
        total = await self.repository.count_users(query)
        return users, total
