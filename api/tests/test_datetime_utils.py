"""Tests for datetime_utils module."""

from datetime import UTC, date, datetime, timedelta
from unittest.mock import patch

from scorekeeper.utils import datetime_utils
from scorekeeper.utils.datetime_utils import (
    MonotonicClock,
    date_to_utc_range,
    now_utc,
)


class TestNowUtc:
    """Tests for now_utc function."""

    def test_is_timezone_aware(self):
        result = now_utc()
        assert isinstance(result, datetime)
        assert result.tzinfo == UTC


class TestDateToUtcRange:
    def test_covers_whole_day(self):
        start, end = date_to_utc_range(date(2025, 9, 14))
        assert start == datetime(2025, 9, 14, tzinfo=UTC)
        assert end - start == timedelta(days=1)


class TestMonotonicClock:
    def test_strictly_increasing_when_wall_clock_stalls(self):
        frozen = datetime(2025, 9, 14, 19, 0, tzinfo=UTC)
        clock = MonotonicClock()
        with patch.object(datetime_utils, "now_utc", return_value=frozen):
            readings = [clock.now() for _ in range(3)]

        assert readings[0] == frozen
        assert readings[1] > readings[0]
        assert readings[2] > readings[1]

    def test_wall_clock_going_backwards(self):
        clock = MonotonicClock()
        later = datetime(2025, 9, 14, 19, 0, tzinfo=UTC)
        with patch.object(datetime_utils, "now_utc", side_effect=[later, later - timedelta(seconds=5)]):
            first = clock.now()
            second = clock.now()
        assert second > first
