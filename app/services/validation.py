"""
State-dependent validation for user data.

Request *shape* is checked by the pydantic schemas; the rules here need the
store. Each request type gets its own ``UniquenessRules`` implementation,
and ``validate_user_data`` composes them into a ``ValidationResult`` before
the operation touches anything.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Protocol

from app.core.exceptions import ConflictError
from app.repositories.user_repository import UserRepository


class UniquenessRules(Protocol):
    async def check_unique_email(self, email: str) -> bool: ...

    async def check_unique_password(self, password: str) -> bool: ...


class RegistrationRules:
    """Uniqueness against every stored user."""

    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository

    async def check_unique_email(self, email: str) -> bool:
        return not await self.repository.email_taken(email)

    async def check_unique_password(self, password: str) -> bool:
        # Passwords are stored as salted hashes, so there is nothing to
        # compare against; reporting a clash would also disclose another
        # account's credential.
        return True


class UpdateRules:
    """Uniqueness against every stored user except the one being updated."""

    def __init__(self, repository: UserRepository, user_id: uuid.UUID) -> None:
        self.repository = repository
        self.user_id = user_id

    async def check_unique_email(self, email: str) -> bool:
        return not await self.repository.email_taken(email, exclude_user_id=self.user_id)

    async def check_unique_password(self, password: str) -> bool:
        return True


@dataclass
class ValidationResult:
    errors: list[dict] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> None:
        self.errors.append({"field": field_name, "message": message})

    def raise_for_errors(self) -> None:
        if self.errors:
            raise ConflictError(
                "; ".join(err["message"] for err in self.errors),
                errors=self.errors,
            )


async def validate_user_data(email: str, password: str, rules: UniquenessRules) -> ValidationResult:
    result = ValidationResult()
    if not await rules.check_unique_email(email):
        result.add("email", "Email is not unique")
    if not await rules.check_unique_password(password):
        result.add("password", "Password is not unique")
    return result
