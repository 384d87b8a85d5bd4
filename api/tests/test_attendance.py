"""Tests for attendance recording."""

from __future__ import annotations

import pytest

from scorekeeper.db.games import GameAttendance
from scorekeeper.db.teams import RosterPlayer
from scorekeeper.services.attendance import (
    AttendanceSubmission,
    attendance_id,
    get_attendance,
    record_attendance,
)
from scorekeeper.services.errors import NotFoundError, ValidationError
from scorekeeper.services.rosters import TeamRoster

HOME = "Bachstreet Boys"
AWAY = "Whiskey Dekes"


class _FakeResult:
    def __init__(self, value) -> None:
        self._value = value

    def scalar_one_or_none(self):
        return self._value


class _FakeSession:
    def __init__(self) -> None:
        self.records: dict[str, GameAttendance] = {}

    async def get(self, model, key):
        return self.records.get(key)

    def add(self, record) -> None:
        self.records[record.id] = record

    async def flush(self) -> None:
        return None

    async def execute(self, statement):
        return _FakeResult(next(iter(self.records.values()), None))


def _payload(**overrides) -> AttendanceSubmission:
    data = {
        "attendance": {HOME: ["J. Smith", "K. Lee"], AWAY: ["R. Jones"]},
        "totalRoster": [
            {"teamName": HOME, "teamId": "bb", "totalPlayers": ["J. Smith", "K. Lee", "M. Diaz"]},
            {"teamName": AWAY, "totalPlayers": ["R. Jones", "T. Park"]},
        ],
    }
    data.update(overrides)
    return AttendanceSubmission.model_validate(data)


class TestRecordAttendance:
    @pytest.mark.asyncio
    async def test_summary_totals(self, game) -> None:
        session = _FakeSession()

        record = await record_attendance(session, game, _payload())

        assert record.id == attendance_id("G1") == "G1-attendance"
        assert record.total_roster_size == 5
        assert record.total_present == 3
        home = record.teams[0]
        assert home["teamName"] == HOME
        assert home["teamId"] == "bb"
        assert home["presentCount"] == 2

    @pytest.mark.asyncio
    async def test_resubmission_replaces_record(self, game) -> None:
        session = _FakeSession()
        await record_attendance(session, game, _payload())

        updated = await record_attendance(
            session, game, _payload(attendance={HOME: ["J. Smith"]})
        )

        assert len(session.records) == 1
        assert updated.total_present == 1
        assert updated.teams[1]["playersPresent"] == []

    @pytest.mark.asyncio
    async def test_team_without_roster_uses_present_count(self, game) -> None:
        record = await record_attendance(_FakeSession(), game, _payload(totalRoster=[]))
        assert record.total_roster_size == 3

    @pytest.mark.asyncio
    async def test_saved_roster_sizes_team_without_total_roster(self, game) -> None:
        saved = [
            TeamRoster(
                team_name=HOME,
                team_type="home",
                team_id="bachstreet-boys",
                players=[RosterPlayer(name=name) for name in ("J. Smith", "K. Lee", "M. Diaz", "T. Park")],
            ),
            TeamRoster(team_name=AWAY, team_type="away"),
        ]

        record = await record_attendance(_FakeSession(), game, _payload(totalRoster=[]), saved)

        home, away = record.teams
        assert (home["teamId"], home["rosterSize"], home["presentCount"]) == ("bachstreet-boys", 4, 2)
        assert (away["teamId"], away["rosterSize"]) == (None, 1)

    @pytest.mark.asyncio
    async def test_unknown_team_rejected(self, game) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await record_attendance(
                _FakeSession(), game, _payload(attendance={"Toe Draggins": ["A"]})
            )
        assert "Toe Draggins" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_attendance_is_not_found(self) -> None:
        with pytest.raises(NotFoundError):
            await get_attendance(_FakeSession(), "G1")
