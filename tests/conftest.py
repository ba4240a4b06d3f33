"""
Shared test fixtures for the Whitelist Console test suite.

Async throughout (aiosqlite + AsyncSession); every test gets a fresh
in-memory database.
"""

import os
import sys
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

SUPER_ADMIN_EMAIL = "root@console.test"

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SUPER_ADMIN_EMAIL"] = SUPER_ADMIN_EMAIL
os.environ["IMPORT_CHUNK_DELAY_SECONDS"] = "0"
os.environ["DELETE_CHUNK_DELAY_SECONDS"] = "0"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import AdminContext, get_current_admin, get_db
from app.api.v1.endpoints.auth import limiter
from app.db.base import Base
from app.db.store import WHITELIST_USERS, RecordStore
from app.main import app

SUPER_ADMIN = AdminContext(
    email=SUPER_ADMIN_EMAIL,
    user_id="root-uid",
    is_super_admin=True,
    name="Super Administrator",
)
PLAIN_ADMIN = AdminContext(
    email="ops@console.test",
    user_id="ops-uid",
    is_super_admin=False,
    name="Ops",
)


@pytest.fixture
async def test_engine():
    """Fresh in-memory database with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session) -> RecordStore:
    return RecordStore(db_session)


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app, signed in as the super admin."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_current_admin] = lambda: SUPER_ADMIN
    limiter.enabled = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def act_as():
    """Switch the signed-in admin for subsequent requests."""

    def _act_as(admin: AdminContext) -> None:
        app.dependency_overrides[get_current_admin] = lambda: admin

    return _act_as


@pytest.fixture
def real_auth():
    """Use the real token-verifying admin dependency."""
    app.dependency_overrides.pop(get_current_admin, None)


def whitelist_row(user_id, *, name=None, created_at=1_000, added_by=SUPER_ADMIN_EMAIL, **extra):
    """Column values for seeding whitelist records directly."""
    row = {
        "name": name or f"User {user_id}",
        "email": f"{user_id}@example.com",
        "user_id": user_id,
        "device_id": f"dev-{user_id}",
        "is_active": True,
        "created_at": created_at,
        "added_at": created_at,
        "added_by": added_by,
        "last_login": 0,
    }
    row.update(extra)
    return row


async def seed_whitelist(store: RecordStore, *rows: tuple) -> None:
    """Insert ``(doc_id, row)`` pairs into the whitelist collection."""
    await store.write_many(WHITELIST_USERS, list(rows))
