"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.
"""

import uuid
from collections.abc import Awaitable, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.wg_common.database import async_session_factory

_INSERT_COMPETITOR_SQL = text("""
    INSERT INTO competitors (id, name, rating) VALUES (:id, :name, :rating)
""")

_INSERT_MATCH_SQL = text("""
    INSERT INTO matches (id, competitor_a_id, competitor_b_id, status, wagering_open)
    VALUES (:id, :a, :b, 'SCHEDULED', TRUE)
""")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        async with app.router.lifespan_context(app):
            yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def new_match() -> Callable[..., Awaitable[tuple[str, str, str]]]:
    """Insert two fresh competitors and a SCHEDULED match between them."""

    async def _create(rating_a: int = 1000, rating_b: int = 1000) -> tuple[str, str, str]:
        uid = uuid.uuid4().hex[:8]
        a, b, match_id = f"ca-{uid}", f"cb-{uid}", f"m-{uid}"
        async with async_session_factory() as session:
            await session.execute(_INSERT_COMPETITOR_SQL, {"id": a, "name": a, "rating": rating_a})
            await session.execute(_INSERT_COMPETITOR_SQL, {"id": b, "name": b, "rating": rating_b})
            await session.execute(_INSERT_MATCH_SQL, {"id": match_id, "a": a, "b": b})
            await session.commit()
        return match_id, a, b

    return _create
