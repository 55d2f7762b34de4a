"""Async SQLAlchemy engine, session factory, declarative Base, and units of work."""


from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings
from app.services.dispatch import discard_outbox, flush_outbox

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
_engine_kwargs: dict = {
    "pool_pre_ping": True,
    "echo": False,
}

# SQLite (local dev) doesn't support connection pooling parameters
if settings.database_url.startswith("sqlite"):
    _engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_async_engine(settings.database_url, **_engine_kwargs)


def enable_sqlite_savepoints(target: AsyncEngine) -> None:
    """Let SQLAlchemy own BEGIN on SQLite so SAVEPOINTs nest inside the unit of work."""

    @event.listens_for(target.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(target.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


if settings.database_url.startswith("sqlite"):
    enable_sqlite_savepoints(engine)

# ---------------------------------------------------------------------------
# Session factory
# ---------------------------------------------------------------------------
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
    autocommit=False,
)

# ---------------------------------------------------------------------------
# Declarative Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """All ORM models inherit from this base."""

# ---------------------------------------------------------------------------
# Units of work
# ---------------------------------------------------------------------------
async def commit_unit(session: AsyncSession) -> None:
    """Commit the session, then release any messages queued during the unit."""
    await session.commit()
    flush_outbox(session)

async def rollback_unit(session: AsyncSession) -> None:
    discard_outbox(session)
    await session.rollback()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one unit of work per request; roll back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await commit_unit(session)
        except Exception:
            await rollback_unit(session)
            raise

@asynccontextmanager
async def session_scope(
    factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Same unit-of-work discipline as ``get_db`` for code outside a request."""
    async with (factory or async_session_factory)() as session:
        try:
            yield session
            await commit_unit(session)
        except Exception:
            await rollback_unit(session)
            raise
