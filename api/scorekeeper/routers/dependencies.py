"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Depends

from ..db import AsyncSession, get_db
from ..services.event_store import SqlEventStore


async def get_event_store(session: AsyncSession = Depends(get_db)) -> SqlEventStore:
    return SqlEventStore(session)
