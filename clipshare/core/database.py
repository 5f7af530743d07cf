"""
Clipshare database layer — async SQLAlchemy engine and session plumbing.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from clipshare.core.config import get_settings
from clipshare.core.errors import Unavailable

logger = logging.getLogger(__name__)
settings = get_settings()


class Base(DeclarativeBase):
    pass


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"timeout": settings.db_command_timeout_seconds}}
    return {
        "pool_size": settings.db_pool_size,
        "pool_pre_ping": True,
        "pool_timeout": settings.db_command_timeout_seconds,
        "connect_args": {"command_timeout": settings.db_command_timeout_seconds},
    }


def _create_engine(url: str) -> AsyncEngine:
    new_engine = create_async_engine(url, echo=settings.db_echo, **_engine_kwargs(url))
    if url.startswith("sqlite"):
        # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; take it over
        @event.listens_for(new_engine.sync_engine, "connect")
        def _sqlite_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            # SQLite ships with foreign keys off; enforce them like PostgreSQL does
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(new_engine.sync_engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return new_engine


engine: AsyncEngine = _create_engine(settings.database_url)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


def configure_engine(url: Optional[str] = None) -> AsyncEngine:
    """Rebind the module-level engine and session factory (tests, CLI)."""
    global engine
    engine = _create_engine(url or settings.database_url)
    async_session_factory.configure(bind=engine)
    return engine


async def init_db() -> None:
    """Create all tables. Migrations are out of scope for this service."""
    from clipshare.models import models  # noqa: F401  register mappers

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def dispose_db() -> None:
    await engine.dispose()


def is_unique_violation(error: sa_exc.IntegrityError) -> bool:
    """True when ``error`` came from a UNIQUE constraint (not FK, NOT NULL or CHECK)."""
    orig = error.orig
    if getattr(orig, "sqlstate", None) == "23505":
        return True
    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    """Translate driver timeouts and dropped connections into ``Unavailable``.

    Integrity errors pass through untouched; the caller decides what a
    constraint violation means for its operation.
    """
    try:
        yield
    except (sa_exc.TimeoutError, asyncio.TimeoutError) as e:
        logger.warning(f"Store timeout during {operation}: {e}")
        raise Unavailable("The data store timed out, please retry", {"operation": operation}) from e
    except sa_exc.IntegrityError:
        raise
    except sa_exc.DBAPIError as e:
        logger.warning(f"Store unavailable during {operation}: {e}")
        raise Unavailable("The data store is unavailable, please retry", {"operation": operation}) from e


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: one session per request, committed on success."""
    async with async_session_factory() as session:
        try:
            yield session
            async with store_errors("commit"):
                await session.commit()
        except Exception:
            await session.rollback()
            raise
