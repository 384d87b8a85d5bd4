"""Tests for teams, rosters and attendance-rate endpoints."""

from __future__ import annotations

import asyncio
import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.sql.dml import Delete

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from api.main import app
from conftest import AWAY, HOME, InMemoryEventStore, build_game
from scorekeeper.db import get_db
from scorekeeper.db.games import GameAttendance
from scorekeeper.db.teams import RosterPlayer, Team
from scorekeeper.routers.dependencies import get_event_store
from scorekeeper.services import rosters
from scorekeeper.services.errors import NotFoundError, ValidationError
from scorekeeper.services.goals import record_goal
from scorekeeper.services.game_locks import GameWriteLocks


class _FakeScalars:
    def __init__(self, items) -> None:
        self._items = items

    def all(self):
        return self._items


class _FakeResult:
    def __init__(self, items) -> None:
        self._items = items

    def scalars(self) -> _FakeScalars:
        return _FakeScalars(self._items)


class _ModelSession:
    """Holds ORM objects; ``select(Model)`` returns every stored ``Model``.

    WHERE clauses are ignored, so each test keeps to data that the query
    under test would return anyway.
    """

    def __init__(self, *objects) -> None:
        self.objects = list(objects)
        self.flushes = 0

    def _of(self, model) -> list:
        return [obj for obj in self.objects if isinstance(obj, model)]

    async def get(self, model, key):
        return next((obj for obj in self._of(model) if obj.id == key), None)

    async def execute(self, statement):
        if isinstance(statement, Delete):
            table = statement.table.name
            self.objects = [obj for obj in self.objects if obj.__tablename__ != table]
            return None
        return _FakeResult(self._of(statement.column_descriptions[0]["entity"]))

    def add(self, obj) -> None:
        self.objects.append(obj)

    def add_all(self, objs) -> None:
        self.objects.extend(objs)

    async def flush(self) -> None:
        self.flushes += 1
        for index, player in enumerate(self._of(RosterPlayer), start=1):
            if player.id is None:
                player.id = index


def _team(team_id: str = "bachstreet-boys", name: str = HOME) -> Team:
    return Team(id=team_id, name=name, division="Gold")


def _player(name: str, player_id: int | None = None, team_id: str = "bachstreet-boys") -> RosterPlayer:
    return RosterPlayer(id=player_id, team_id=team_id, name=name)


def _attendance(game_id: str, present: dict[str, list[str]]) -> GameAttendance:
    return GameAttendance(
        id=f"{game_id}-attendance",
        game_id=game_id,
        teams=[{"teamName": team, "playersPresent": names} for team, names in present.items()],
        total_roster_size=0,
        total_present=sum(len(names) for names in present.values()),
        recorded_at=datetime(2025, 9, 14, 21, 0, tzinfo=timezone.utc),
    )


class TestRosterService:
    @pytest.mark.asyncio
    async def test_create_team_generates_slug_id(self) -> None:
        session = _ModelSession()
        team = await rosters.create_team(
            session, rosters.TeamCreate(name="Bachstreet Boys", division="gold")
        )
        assert (team.id, team.division) == ("bachstreet-boys", "Gold")

    @pytest.mark.asyncio
    async def test_duplicate_team_rejected(self) -> None:
        session = _ModelSession(_team())
        with pytest.raises(ValidationError):
            await rosters.create_team(session, rosters.TeamCreate(name=HOME, division="Gold"))

    @pytest.mark.asyncio
    async def test_unknown_team_is_not_found(self) -> None:
        with pytest.raises(NotFoundError):
            await rosters.get_team(_ModelSession(), "nope")

    @pytest.mark.asyncio
    async def test_replace_roster_drops_previous_players(self) -> None:
        team = _team()
        session = _ModelSession(team, _player("Old Timer"))
        payload = rosters.RosterSubmission.model_validate(
            {"players": [{"name": "J. Smith", "number": 9}, {"name": "K. Lee", "position": "D"}]}
        )

        players = await rosters.replace_roster(session, team, payload)

        assert [player.name for player in players] == ["J. Smith", "K. Lee"]
        assert players[0].number == "9"
        assert [player.name for player in session._of(RosterPlayer)] == ["J. Smith", "K. Lee"]

    def test_duplicate_roster_names_rejected(self) -> None:
        with pytest.raises(ValueError):
            rosters.RosterSubmission.model_validate({"players": [{"name": "A"}, {"name": "A"}]})

    @pytest.mark.asyncio
    async def test_game_rosters_away_first_and_unregistered_team_empty(self) -> None:
        session = _ModelSession(_team(), _player("J. Smith"), _player("K. Lee"))

        away, home = await rosters.get_game_rosters(session, build_game())

        assert (away.team_name, away.team_type, away.team_id, away.players) == (AWAY, "away", None, [])
        assert (home.team_name, home.team_type, home.team_id) == (HOME, "home", "bachstreet-boys")
        assert [player.name for player in home.players] == ["J. Smith", "K. Lee"]


class _ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session = _ModelSession()
        self.store = InMemoryEventStore()

        async def override_get_db() -> AsyncGenerator[_ModelSession, None]:
            yield self.session

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_event_store] = lambda: self.store
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()


class TestTeamEndpoints(_ApiTestCase):
    def test_create_list_and_roster(self) -> None:
        created = self.client.post("/api/teams", json={"name": HOME, "division": "gold"})
        self.assertEqual(created.status_code, 201)
        team_id = created.json()["id"]

        teams = self.client.get("/api/teams").json()
        self.assertEqual(teams, [{"id": team_id, "name": HOME, "division": "Gold"}])

        saved = self.client.put(
            f"/api/teams/{team_id}/roster",
            json={"players": [{"name": "J. Smith", "number": "9", "position": "F"}, {"name": "K. Lee"}]},
        )
        self.assertEqual(saved.status_code, 200)
        roster = self.client.get(f"/api/teams/{team_id}/roster").json()
        self.assertEqual([player["name"] for player in roster], ["J. Smith", "K. Lee"])
        self.assertEqual(roster[1]["number"], "")

    def test_roster_for_unknown_team_is_404(self) -> None:
        self.assertEqual(self.client.get("/api/teams/nope/roster").status_code, 404)

    def test_game_rosters(self) -> None:
        self.session.objects += [build_game("G1"), _team(), _player("J. Smith", player_id=7)]

        response = self.client.get("/api/rosters", params={"gameId": "G1"})

        self.assertEqual(response.status_code, 200)
        away, home = response.json()
        self.assertEqual((away["teamType"], away["teamName"], away["players"]), ("away", AWAY, []))
        self.assertEqual(home["teamId"], "bachstreet-boys")
        self.assertEqual(home["players"][0]["name"], "J. Smith")
        self.assertEqual(home["players"][0]["playerId"], 7)

    def test_game_rosters_requires_game_id(self) -> None:
        self.assertEqual(self.client.get("/api/rosters").status_code, 400)
        self.assertEqual(self.client.get("/api/rosters", params={"gameId": "G9"}).status_code, 404)

    def test_team_attendance_rates(self) -> None:
        self.session.objects += [
            build_game("G1"),
            build_game("G2"),
            build_game("G3"),
            _team(),
            _player("J. Smith"),
            _player("K. Lee"),
            _attendance("G1", {HOME: ["J. Smith", "K. Lee"], AWAY: ["R. Jones"]}),
            _attendance("G2", {HOME: ["J. Smith", "Sub Skater"], AWAY: []}),
        ]

        lines = self.client.get("/api/teams/bachstreet-boys/attendance").json()

        self.assertEqual(
            [(line["player"], line["attendancePercentage"]) for line in lines],
            [("J. Smith", 100), ("K. Lee", 50), ("Sub Skater", 50)],
        )
        self.assertEqual(lines[0]["gamesWithAttendance"], 2)
        self.assertEqual(lines[0]["scheduledGames"], 3)


class TestPlayerTotalsEndpoint(_ApiTestCase):
    def _seed_goal(self, game_id: str, player: str) -> None:
        asyncio.run(
            record_goal(
                self.store,
                {"gameId": game_id, "team": HOME, "player": player, "period": 1, "time": "05:30"},
                locks=GameWriteLocks(enabled=False),
            )
        )

    def test_games_played_counts_only_games_with_the_player(self) -> None:
        games = [build_game("G1"), build_game("G2"), build_game("G3")]
        self.session.objects += games
        self.store.games = {game.id: game for game in games}
        self._seed_goal("G1", "J. Smith")

        totals = self.client.get("/api/players/J. Smith/stats", params={"season": "Fall"}).json()

        self.assertEqual(totals["gamesPlayed"], 1)
        self.assertEqual(totals["goals"], 1)
        self.assertEqual(totals["gamesWithPoint"], 1)

    def test_attendance_counts_as_a_game_played(self) -> None:
        games = [build_game("G1"), build_game("G2"), build_game("G3")]
        self.session.objects += games + [_attendance("G2", {HOME: ["J. Smith"], AWAY: []})]
        self.store.games = {game.id: game for game in games}
        self._seed_goal("G1", "J. Smith")

        totals = self.client.get("/api/players/J. Smith/stats").json()

        self.assertEqual(totals["gamesPlayed"], 2)
        self.assertEqual(totals["gamesWithPoint"], 1)
