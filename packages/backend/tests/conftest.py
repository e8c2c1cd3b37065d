"""Test fixtures — a fresh in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite (aiosqlite) in-memory engine. StaticPool
   keeps one connection alive so every session sees the same database.
2. Tables are created from the ORM metadata, then dropped with the engine.
3. get_db is overridden to hand out sessions from that engine.

The `client` fixture also overrides get_current_user with a real user
row, so issue tests don't need to register+login first. Auth tests use
`unauthenticated_client`, which runs the real bearer-token pipeline.
"""

import os

# Must be set before issuetracker.config is imported.
os.environ.setdefault("ISSUETRACKER_ENVIRONMENT", "test")
os.environ.setdefault("ISSUETRACKER_BCRYPT_ROUNDS", "4")

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from issuetracker.auth.dependencies import CurrentIdentity, get_current_user  # noqa: E402
from issuetracker.auth.password import hash_password  # noqa: E402
from issuetracker.db.engine import get_db  # noqa: E402
from issuetracker.db.models import Base, User  # noqa: E402
from issuetracker.main import app  # noqa: E402

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

TEST_USER_EMAIL = "owner@example.com"
TEST_USER_PASSWORD = "owner-password"


@pytest_asyncio.fixture()
async def session_factory():
    """Per-test engine with all tables created."""
    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        yield factory
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """A session for tests that call services directly."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def test_user(session_factory) -> User:
    """A persisted user that the `client` fixture authenticates as."""
    async with session_factory() as session:
        user = User(email=TEST_USER_EMAIL, password_hash=hash_password(TEST_USER_PASSWORD))
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


def _override_db(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    return override_get_db


@pytest_asyncio.fixture()
async def client(session_factory, test_user):
    """HTTP client with get_db and auth overridden for testing."""

    def override_get_current_user():
        return CurrentIdentity(user_id=test_user.id, email=test_user.email)

    app.dependency_overrides[get_db] = _override_db(session_factory)
    app.dependency_overrides[get_current_user] = override_get_current_user

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def unauthenticated_client(session_factory):
    """HTTP client WITHOUT auth override — for testing real token flows."""
    app.dependency_overrides[get_db] = _override_db(session_factory)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def register_and_login(client: AsyncClient, email: str, password: str = "password_123") -> str:
    """Register a user through the API and return its bearer token."""
    r = await client.post("/api/users/register", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    return r.json()["data"]["token"]
