"""Per-game serialization of event writes.

Derived counters are computed by counting existing rows, so two concurrent
submissions for the same game can both read the same count before either
insert lands. Holding the game's lock around count-then-insert closes that
window for writers inside this process. Separate worker processes each hold
their own registry and can still race.
"""

from __future__ import annotations

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from ..config import settings


class GameWriteLocks:
    """Registry of ``asyncio.Lock`` objects keyed by game id.

    Locks are weakly referenced: a game's lock disappears once no coroutine
    is holding or waiting on it.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, game_id: str) -> asyncio.Lock:
        lock = self._locks.get(game_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[game_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, game_id: str) -> AsyncIterator[None]:
        if not self.enabled:
            yield
            return
        lock = self._lock_for(game_id)
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)


write_locks = GameWriteLocks(enabled=settings.serialize_event_writes)


def get_write_locks() -> GameWriteLocks:
    """FastAPI dependency returning the process-wide lock registry."""
    return write_locks
