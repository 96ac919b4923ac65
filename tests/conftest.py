"""
Shared test fixtures for the User Accounts API test suite.

Async throughout (aiosqlite + AsyncSession), one event loop per session.
"""

import os
import sys
from typing import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256-signing"
os.environ["ACCESS_TOKEN_LIFETIME_MINUTES"] = "30"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_db
from app.db.base import Base
from app.db.init_db import seed_roles
from app.main import app
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.user_service import UserService

# app.db.session builds its own engine at import time; tests use a
# separate in-memory engine and override the dependency instead.
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

DEFAULT_PASSWORD = "s3cret-Passw0rd"


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables and seed roles before each test, drop them after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with TestingSessionLocal() as session:
        await seed_roles(session)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def service(repository: UserRepository) -> UserService:
    return UserService(repository)


@pytest.fixture
def make_user(service: UserService) -> Callable[..., Awaitable[User]]:
    """Factory registering a user straight through the service layer."""

    async def _make(name: str, email: str | None = None, age: int = 30) -> User:
        email = email or f"{name.lower().replace(' ', '.')}@example.com"
        return await service.register(name, email, DEFAULT_PASSWORD, age)

    return _make


@pytest.fixture
async def auth_headers(async_client: AsyncClient) -> dict[str, str]:
    """Register + log in a caller and return a Bearer Authorization header."""
    await async_client.post(
        "/api/v1/auth/register",
        json={"name": "Caller", "age": 40, "email": "caller@example.com", "password": DEFAULT_PASSWORD},
    )
    resp = await async_client.post(
        "/api/v1/auth/login",
        json={"email": "caller@example.com", "password": DEFAULT_PASSWORD},
    )
    assert resp.status_code == 200, resp.text
    async_client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
