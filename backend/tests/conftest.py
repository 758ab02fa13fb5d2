"""
unMute Backend: Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the entire test suite.
How:   HTTP tests run the real app through httpx's ASGITransport against a
       temporary SQLite file (aiosqlite). Service unit tests use AsyncMock
       sessions and need no database.

Fixture Hierarchy:
    Autouse (every test):
    └── setup_database: create_all before, drop_all + engine dispose after

    Function-scoped:
    ├── mock_db_session: Mock AsyncSession
    ├── temp_storage: Temporary directory for file operations
    ├── png_bytes / jpeg_bytes: Minimal image payloads
    ├── test_client: httpx AsyncClient bound to the app
    ├── make_user: factory that registers (optionally promotes) and logs in
    └── user / other_user / admin: ready-made accounts with auth headers
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time; configure the environment before any
# unmute module is imported
_TEST_DIR = tempfile.mkdtemp(prefix="unmute_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_DIR, "storage")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import update  # noqa: E402

import unmute.models  # noqa: E402,F401
from unmute.database import Base, async_session_factory, engine  # noqa: E402
from unmute.models.user import User  # noqa: E402

DEFAULT_PASSWORD = "secret123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture(autouse=True)
async def setup_database():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled connections belong to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session():
    """A real session for asserting on rows after HTTP calls."""
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_delete(mock_db_session):
            mock_db_session.get.return_value = entry
            await journal_service.delete_entry(mock_db_session, principal, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    session.expunge = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def png_bytes():
    """PNG signature followed by an IHDR chunk header; libmagic reports image/png."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 17


@pytest.fixture
def jpeg_bytes():
    """Minimal JPEG: SOI + JFIF APP0 header + EOI."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client():
    """
    Async HTTP client wired to the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from unmute.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_user(test_client):
    """
    Factory fixture: register an account, optionally make it an admin, log in.

    Returns a dict with id, email, token and ready-to-use headers.
    """

    async def _make_user(email, password=DEFAULT_PASSWORD, username=None, admin=False):
        body = {"email": email, "password": password}
        if username:
            body["username"] = username
        response = await test_client.post("/auth/register", json=body)
        assert response.status_code == 201, response.text
        user_id = response.json()["data"]["id"]

        if admin:
            async with async_session_factory() as session:
                await session.execute(
                    update(User).where(User.id == user_id).values(is_admin=True)
                )
                await session.commit()

        response = await test_client.post(
            "/auth/login", json={"identifier": email, "password": password}
        )
        assert response.status_code == 200, response.text
        token = response.json()["data"]["token"]
        return {
            "id": user_id,
            "email": email,
            "password": password,
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _make_user


@pytest_asyncio.fixture
async def user(make_user):
    return await make_user("alice@example.com", username="alice")


@pytest_asyncio.fixture
async def other_user(make_user):
    return await make_user("bob@example.com", username="bob")


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user("admin@example.com", username="admin", admin=True)
