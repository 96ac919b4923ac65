"""Pydantic schemas for JWT access tokens."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user_id: uuid.UUID
