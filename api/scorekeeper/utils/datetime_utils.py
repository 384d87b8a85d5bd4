"""Datetime helpers for the API layer.

All datetime fields in responses are UTC (ISO 8601).
"""

from __future__ import annotations

import threading
from datetime import date, datetime, time, timedelta, timezone


def now_utc() -> datetime:
    """Get the current time in UTC, timezone-aware."""
    return datetime.now(timezone.utc)


def date_to_utc_range(day: date) -> tuple[datetime, datetime]:
    """Return the [start, end) UTC range covering a calendar day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class MonotonicClock:
    """UTC clock whose readings strictly increase within the process.

    Two events recorded in the same microsecond (or across a backwards wall
    clock adjustment) still receive distinct, ordered timestamps.
    """

    _STEP = timedelta(microseconds=1)

    def __init__(self) -> None:
        self._last: datetime | None = None
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            current = now_utc()
            if self._last is not None and current <= self._last:
                current = self._last + self._STEP
            self._last = current
            return current


recording_clock = MonotonicClock()
