"""Postgres access for the scorekeeper.

Models live in ``games`` (games, attendance), ``events`` (the append-only
event log) and ``teams`` (teams, rosters). Importing this package registers
all of them on ``Base.metadata`` so relationships and Alembic autogenerate
see the full schema.

Routers take a request-scoped session from ``get_db``; scripts use
``get_async_session``. Both commit on success and roll back on error.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncGenerator, AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from .base import Base
from . import events, games, teams  # noqa: F401

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

from ..config import settings

# Created on first use; tests import the services without a reachable database.
_engine: "AsyncEngine | None" = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _engine, _session_factory
    if _session_factory is None:
        _engine = create_async_engine(
            settings.database_url, echo=settings.sql_echo, pool_pre_ping=True
        )
        # Event rows are read back after commit to build responses.
        _session_factory = async_sessionmaker(_engine, expire_on_commit=False, autoflush=False)
    return _session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with _get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_async_session() -> AsyncIterator[AsyncSession]:
    """Session for CLI scripts such as the schedule import."""
    async with _get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """Dispose the engine at app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


__all__ = ["Base", "AsyncSession", "get_db", "get_async_session", "close_db"]
