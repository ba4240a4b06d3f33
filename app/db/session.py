"""
Async SQLAlchemy engine & session factory.

PostgreSQL (asyncpg) in production; any async driver URL works, which the
test suite uses to run against in-memory SQLite.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

engine_kwargs: dict = {
    "echo": settings.DATABASE_ECHO,
    "pool_pre_ping": True,
}

if settings.DATABASE_URL.startswith("postgresql"):
    # Bulk jobs hold a session for minutes; keep a few spare connections
    engine_kwargs.update(pool_size=10, max_overflow=5, pool_recycle=300)

engine = create_async_engine(settings.DATABASE_URL, **engine_kwargs)

# Objects stay readable after commit; the record store re-reads explicitly
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
