"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.

Pre-condition: a migrated PostgreSQL at DATABASE_URL (alembic upgrade head).
"""

import uuid
from collections.abc import Awaitable, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app

Member = tuple[str, dict[str, str]]


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def new_member(client: AsyncClient) -> Callable[[str], Awaitable[Member]]:
    """Factory: register a fresh user and return (user_id, auth headers)."""

    async def _make(name: str) -> Member:
        creds = {
            "name": name,
            "email": f"{name.lower()}_{uuid.uuid4().hex[:8]}@example.com",
            "password": "Swap4Life",
        }
        reg = await client.post("/api/v1/auth/register", json=creds)
        assert reg.status_code == 201, reg.text
        login = await client.post(
            "/api/v1/auth/login",
            json={"email": creds["email"], "password": creds["password"]},
        )
        token = login.json()["data"]["access_token"]
        return reg.json()["data"]["user_id"], {"Authorization": f"Bearer {token}"}

    return _make
