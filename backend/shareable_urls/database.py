"""
Shareable URLs Backend - Database Engine & Session Management
==============================================================

What:  Async SQLAlchemy engine, session factory, declarative base and lifecycle helpers.
How:   Creates an async engine from settings, exposes a session factory that the
       SQL-backed record store opens one short session from per get/put.
Who:   Used by SQLRecordStore, the health check, Alembic and the app lifespan.
When:  Engine is created at module import; sessions are created per store call.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings for server
    databases (PostgreSQL). SQLite URLs keep SQLAlchemy's default pool, which
    does not accept sizing arguments.
"""

from typing import Any, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from shareable_urls.config import Settings, settings


def build_engine(config: Settings) -> AsyncEngine:
    """
    Create an async engine for the configured database URL.

    Pool sizing is only applied to non-SQLite URLs.
    SQL statements are echoed when LOG_LEVEL=DEBUG.
    """
    kwargs: Dict[str, Any] = {"echo": config.log_level == "DEBUG"}
    if not config.is_sqlite:
        kwargs.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(config.database_url, **kwargs)


# ── Engine Configuration ──────────────────────────────────────────────────
engine = build_engine(settings)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: returned rows stay readable after the session commits
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, read by Alembic for migrations and by
    create_tables() for development bootstrapping.
    """
    pass


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_tables() -> None:
    """
    What:  Creates every table registered on Base.metadata if missing.
    When:  App startup, only when DB_CREATE_TABLES is enabled.
    How:   Runs metadata.create_all through the async connection's run_sync bridge.
    """
    # Registers KVEntry on Base.metadata
    from shareable_urls.models import kv_entry  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
