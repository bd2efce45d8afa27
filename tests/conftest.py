"""Shared test fixtures."""

import os

# config.settings refuses to load without a secret
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("EVENT_BUS", "memory")

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
