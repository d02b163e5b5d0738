"""Async SQLAlchemy engine and session dependency for the write-through store.

The engine is created at import time but never connects until a session is
opened, so an in-memory deployment (PERSISTENCE_ENABLED=False) needs no
running database.
"""

from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def ping_database() -> None:
    """Fail fast at startup if the configured database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def get_db_session() -> AsyncGenerator[AsyncSession | None, None]:
    """FastAPI dependency: an AsyncSession, or None when persistence is off.

    Services treat None as "the in-memory arena is authoritative" and skip
    write-through. Commit and rollback stay with the service.
    """
    if not settings.PERSISTENCE_ENABLED:
        yield None
        return
    async with async_session_factory() as session:
        yield session
