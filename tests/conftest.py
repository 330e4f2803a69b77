import os
import tempfile
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# TEST ENVIRONMENT
# Must be set BEFORE importing app.main so settings, the engine and the
# limiter are built against a throwaway SQLite file.
# ------------------------------------------------------------------
_TMP_DIR = tempfile.mkdtemp(prefix="pgb-tests-")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CLEANUP_ENABLED"] = "false"
os.environ["UPLOADS_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ.pop("CORS_ORIGINS", None)
os.environ.pop("JOB_SECRET", None)
os.environ.pop("REDIS_URL", None)

from sqlmodel import SQLModel  # noqa: E402

from app.main import app  # noqa: E402
from app.api.deps import get_realtime  # noqa: E402
from app.core.database import AsyncSessionLocal, engine, init_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.models.user import UserRole  # noqa: E402
from app.services.auth_service import create_user  # noqa: E402


@pytest_asyncio.fixture
async def db():
    """Fresh schema for every test."""
    await init_db()
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


@pytest_asyncio.fixture
async def session(db):
    async with AsyncSessionLocal() as s:
        yield s


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def realtime_mock():
    """Replaces the Socket.IO server seen by route handlers."""
    mock = MagicMock()
    mock.notify_user = AsyncMock()
    mock.notify_conversation = AsyncMock()
    app.dependency_overrides[get_realtime] = lambda: mock
    yield mock
    app.dependency_overrides.pop(get_realtime, None)


@pytest_asyncio.fixture
async def make_user(db):
    async def _make(
        role: UserRole = UserRole.Staff,
        department: str | None = None,
        email: str | None = None,
        password: str = "password123",
        name: str = "Test User",
    ):
        async with AsyncSessionLocal() as s:
            return await create_user(
                s,
                name=name,
                email=email or f"user-{uuid4().hex[:8]}@example.com",
                password=password,
                role=role,
                department=department,
            )

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(role=UserRole.Admin, name="Admin", email="admin@example.com")
