"""Integration-test fixtures.

Requires a running PostgreSQL with migrations applied (alembic upgrade head).
All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool stays valid across the session.
"""

import uuid
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.bm_common.database import async_session_factory
from src.main import app

_HERE = Path(__file__).parent


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if _HERE in Path(str(item.fspath)).parents:
            item.add_marker(pytest.mark.integration)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def unique_user(role: str = "buyer") -> dict[str, Any]:
    uid = uuid.uuid4().hex[:8]
    return {
        "name": f"User {uid}",
        "email": f"user_{uid}@example.com",
        "phone": f"+2567{uuid.uuid4().int % 10**8:08d}",
        "password": "TestPass123!",
        "password_confirmation": "TestPass123!",
        "role": role,
    }


async def register(client: AsyncClient, role: str = "buyer") -> tuple[str, dict[str, str]]:
    """Register a fresh user; return (user_id, auth headers)."""
    resp = await client.post("/api/v1/auth/register", json=unique_user(role))
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    return data["user"]["user_id"], {"Authorization": f"Bearer {data['access_token']}"}


async def promote_to_admin(user_id: str) -> None:
    # No public endpoint grants the admin role
    async with async_session_factory() as session:
        await session.execute(
            text("UPDATE users SET role = 'admin' WHERE id = :id"),
            {"id": uuid.UUID(user_id)},
        )
        await session.commit()
