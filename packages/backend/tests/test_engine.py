"""Engine lifecycle tests — init_db / close_db and the uninitialised state.

Learn: The API tests override get_db, so nothing else touches the real
engine globals. These tests drive them directly and always close_db()
on the way out.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from issuetracker.db import engine as db_engine
from issuetracker.errors import InternalError
from issuetracker.main import app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


def test_accessors_raise_before_init():
    with pytest.raises(InternalError) as engine_exc:
        db_engine.get_engine()
    with pytest.raises(InternalError) as factory_exc:
        db_engine.get_session_factory()
    assert engine_exc.value.message == factory_exc.value.message
    assert engine_exc.value.status_code == 500


@pytest.mark.asyncio
async def test_init_then_close():
    db_engine.init_db(TEST_DB_URL)
    try:
        await db_engine.create_tables()
        async for session in db_engine.get_db():
            assert (await session.execute(text("SELECT 1"))).scalar() == 1
    finally:
        await db_engine.close_db()

    with pytest.raises(InternalError):
        db_engine.get_engine()


@pytest.mark.asyncio
async def test_request_without_database_is_500_envelope():
    app.dependency_overrides.clear()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        r = await ac.get("/health")
    assert r.status_code == 500
    assert r.json()["success"] is False
    assert r.json()["message"] == "Database not initialized. Call init_db() first."
