"""Pydantic schemas for User CRUD, roles and listing."""

from __future__ import annotations

import re
import uuid
from datetime import datetime

from pydantic import BaseModel, field_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if not v:
        raise ValueError("Email is empty")
    if len(v) > 320 or not _EMAIL_RE.match(v):
        raise ValueError("Email is not correct")
    return v


def _require_password(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Password is empty")
    return v


# ── Requests ────────────────────────────────────────────────────────
class _UserFields(BaseModel):
    name: str
    age: int
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("age")
    @classmethod
    def _age(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Age is not correct")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _require_password(v)


class UserCreate(_UserFields):
    age: int = 0


class UserUpdate(_UserFields):
    """Full replacement: every field is required."""


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        return _require_password(v)


class AddRoleRequest(BaseModel):
    role_name: str


# ── Responses ───────────────────────────────────────────────────────
class RoleRead(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    age: int
    email: str
    roles: list[RoleRead]
    created_at: datetime | None

    model_config = {"from_attributes": True}


class UserPage(BaseModel):
    items: list[UserRead]
    total: int
    limit: int
    offset: int
