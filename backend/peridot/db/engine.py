"""SQLAlchemy async engine and session factory."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from peridot.config import Settings
from peridot.db.models import Base

logger = logging.getLogger("peridot.db")


def _build_engine_kwargs(settings: Settings) -> dict:
    """Return engine kwargs appropriate for the configured dialect."""
    if settings.is_postgres:
        return {
            "echo": settings.DEBUG,
            "future": True,
            "pool_size": settings.PERIDOT_DB_POOL_SIZE,
            "max_overflow": settings.PERIDOT_DB_MAX_OVERFLOW,
            "pool_timeout": settings.PERIDOT_DB_POOL_TIMEOUT,
            "pool_pre_ping": True,
            "pool_recycle": 1800,
        }
    # SQLite: single file, no pool tunables
    return {
        "echo": settings.DEBUG,
        "future": True,
        "connect_args": {"check_same_thread": False},
    }


def build_engine(settings: Settings) -> AsyncEngine:
    engine = create_async_engine(settings.PERIDOT_DB_URL, **_build_engine_kwargs(settings))

    if settings.is_sqlite:
        # Foreign keys are off by default in SQLite; the repo/branch/pull
        # chain relies on them to reject dangling references.
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragmas(dbapi_conn, _conn_rec):  # type: ignore[misc]
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables.  Existing tables are left alone."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ready on %s", engine.dialect.name)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: yields a session and commits/rollbacks."""
    async with request.app.state.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
