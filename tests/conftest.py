"""
Shared pytest fixtures for Geofence Manager tests.

The environment must be configured before any app.* import: settings are
read once and the engine is created at import time.
"""

import asyncio
import os
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY app.* imports)
# ---------------------------------------------------------------------------
_DB_DIR = Path(tempfile.mkdtemp(prefix="geofence-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR / 'test.db'}"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from app.models.database import Base, engine, async_session_maker  # noqa: E402
from app.models import User, UserRole  # noqa: E402
from app.core.security import create_token_pair  # noqa: E402


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _create_user(email, role=UserRole.CLIENT, is_active=True):
    async with async_session_maker() as session:
        user = User(
            email=email,
            first_name="Test",
            last_name="User",
            role=role,
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


# ---------------------------------------------------------------------------
# Section 2: Client fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def client():
    """FastAPI TestClient over a freshly created schema."""
    asyncio.run(_reset_schema())

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Section 3: Users and credentials
# ---------------------------------------------------------------------------


@pytest.fixture
def make_user(client):
    """Factory creating users in the test database."""
    def _make(email, role=UserRole.CLIENT, is_active=True):
        return asyncio.run(_create_user(email, role, is_active))
    return _make


@pytest.fixture
def user(make_user):
    return make_user("owner@mapsdemo.io")


@pytest.fixture
def other_user(make_user):
    return make_user("neighbor@mapsdemo.io")


@pytest.fixture
def admin_user(make_user):
    return make_user("admin@mapsdemo.io", role=UserRole.ADMIN)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    """Authorization headers carrying an access token for a user."""
    def _headers(user):
        access_token, _ = create_token_pair(user)
        return bearer(access_token)
    return _headers


@pytest.fixture
def auth_headers(user, headers_for):
    return headers_for(user)
