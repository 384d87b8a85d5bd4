"""Tests for schedule maintenance and the games endpoints."""

from __future__ import annotations

import asyncio
import unittest
from datetime import date, datetime, timezone
from typing import AsyncGenerator

import pydantic
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from api.main import app
from conftest import build_game
from scorekeeper.db import get_db
from scorekeeper.db.games import Game
from scorekeeper.services import schedule
from scorekeeper.services.errors import NotFoundError, ValidationError


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

    def scalar_one_or_none(self):
        return self._items[0] if self._items else None


class _FakeSession:
    """Keeps games by id; ``execute`` returns every stored game."""

    def __init__(self, games=()) -> None:
        self.games = {game.id: game for game in games}
        self.statements = []
        self.flushes = 0

    async def get(self, model, key):
        return self.games.get(key) if model is Game else None

    async def execute(self, statement):
        self.statements.append(statement)
        return _FakeResult(list(self.games.values()))

    def add(self, obj) -> None:
        self.games[obj.id] = obj

    async def flush(self) -> None:
        self.flushes += 1


class _RacingSession(_FakeSession):
    """A concurrent writer inserts the same id between the lookup and the flush."""

    def __init__(self) -> None:
        super().__init__()
        self.rollbacks = 0

    async def flush(self) -> None:
        raise IntegrityError("INSERT INTO games", {}, Exception("duplicate key value"))

    async def rollback(self) -> None:
        self.rollbacks += 1


def _record(**overrides) -> dict:
    record = {
        "homeTeam": "Bachstreet Boys",
        "awayTeam": "Whiskey Dekes",
        "division": "gold",
        "season": "Fall",
        "year": 2025,
        "scheduledAt": "2025-09-14T19:00:00Z",
    }
    record.update(overrides)
    return record


class TestScheduleService(unittest.TestCase):
    def test_generated_id_and_normalized_division(self) -> None:
        session = _FakeSession()
        game = asyncio.run(schedule.create_game(session, schedule.GameCreate.model_validate(_record())))

        self.assertEqual(game.id, "fall-2025-20250914-bachstreet-boys-vs-whiskey-dekes")
        self.assertEqual(game.division, "Gold")
        self.assertEqual(game.status, "scheduled")

    def test_duplicate_id_rejected(self) -> None:
        session = _FakeSession([build_game("G1")])
        with self.assertRaises(ValidationError):
            asyncio.run(schedule.create_game(session, schedule.GameCreate.model_validate(_record(id="G1"))))

    def test_concurrent_duplicate_id_rejected(self) -> None:
        session = _RacingSession()
        with self.assertRaises(ValidationError) as ctx:
            asyncio.run(schedule.create_game(session, schedule.GameCreate.model_validate(_record(id="G1"))))

        self.assertIn("G1 already exists", str(ctx.exception))
        self.assertEqual(session.rollbacks, 1)

    def test_same_team_twice_rejected(self) -> None:
        with self.assertRaises(pydantic.ValidationError):
            schedule.GameCreate.model_validate(_record(awayTeam="Bachstreet Boys"))

    def test_update_status_and_score(self) -> None:
        session = _FakeSession([build_game("G1", status="in-progress")])
        update = schedule.GameUpdate.model_validate({"status": "final", "homeScore": 4, "awayScore": 2})

        game = asyncio.run(schedule.update_game(session, "G1", update))

        self.assertEqual((game.status, game.home_score, game.away_score), ("final", 4, 2))

    def test_empty_update_rejected(self) -> None:
        session = _FakeSession([build_game("G1")])
        with self.assertRaises(ValidationError):
            asyncio.run(schedule.update_game(session, "G1", schedule.GameUpdate()))

    def test_update_unknown_game(self) -> None:
        with self.assertRaises(NotFoundError):
            asyncio.run(schedule.update_game(_FakeSession(), "nope", schedule.GameUpdate(status="final")))

    def test_list_filters_compile(self) -> None:
        session = _FakeSession()
        asyncio.run(
            schedule.list_games(
                session, division="silver", start=date(2025, 9, 1), end=date(2025, 9, 30), team="X"
            )
        )
        sql = str(session.statements[0])
        self.assertIn("games.division =", sql)
        self.assertIn("games.scheduled_at >=", sql)
        self.assertIn("games.scheduled_at <", sql)
        self.assertIn("ORDER BY games.scheduled_at", sql)

    def test_import_is_idempotent(self) -> None:
        session = _FakeSession()
        records = [_record(), _record(awayTeam="Toe Draggins"), {"homeTeam": "only"}]

        first = asyncio.run(schedule.import_schedule(session, records))
        second = asyncio.run(schedule.import_schedule(session, records))

        self.assertEqual(len(first.created), 2)
        self.assertEqual(len(first.invalid), 1)
        self.assertTrue(first.invalid[0].startswith("2: "))
        self.assertEqual(second.created, [])
        self.assertEqual(sorted(second.skipped), sorted(first.created))

    def test_import_skips_duplicates_within_one_file(self) -> None:
        summary = asyncio.run(schedule.import_schedule(_FakeSession(), [_record(), _record()]))
        self.assertEqual(len(summary.created), 1)
        self.assertEqual(len(summary.skipped), 1)


class TestGamesEndpoints(unittest.TestCase):
    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _override_db(self, session: _FakeSession) -> None:
        async def override_get_db() -> AsyncGenerator[_FakeSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db

    def test_list_and_get(self) -> None:
        self._override_db(_FakeSession([build_game("G1")]))
        client = TestClient(app)

        games = client.get("/api/games", params={"division": "gold", "status": "in-progress"}).json()
        self.assertEqual(games[0]["homeTeam"], "Bachstreet Boys")
        self.assertEqual(games[0]["scheduledAt"], "2025-09-14T19:00:00Z")

        self.assertEqual(client.get("/api/games/G1").json()["id"], "G1")
        self.assertEqual(client.get("/api/games/G2").status_code, 404)

    def test_invalid_status_filter_is_400(self) -> None:
        self._override_db(_FakeSession())
        response = TestClient(app).get("/api/games", params={"status": "postponed"})
        self.assertEqual(response.status_code, 400)

    def test_create_and_patch(self) -> None:
        session = _FakeSession()
        self._override_db(session)
        client = TestClient(app)

        created = client.post("/api/games", json=_record(venue="Rink 2"))
        self.assertEqual(created.status_code, 201)
        game_id = created.json()["id"]

        patched = client.patch(f"/api/games/{game_id}", json={"status": "final", "homeScore": 3})
        self.assertEqual(patched.status_code, 200)
        self.assertEqual(patched.json()["status"], "final")
        self.assertEqual(patched.json()["homeScore"], 3)
        self.assertIsNone(patched.json()["awayScore"])

    def test_divisions(self) -> None:
        divisions = TestClient(app).get("/api/divisions").json()
        self.assertEqual([d["name"] for d in divisions], ["Gold", "Silver", "Bronze"])


class TestLoadRecords:
    def test_accepts_list_or_wrapped_object(self, tmp_path: Path) -> None:
        from scripts.import_schedule import load_records

        as_list = tmp_path / "list.json"
        as_list.write_text('[{"id": "G1"}]', encoding="utf-8")
        wrapped = tmp_path / "wrapped.json"
        wrapped.write_text('{"games": [{"id": "G2"}]}', encoding="utf-8")

        assert load_records(as_list) == [{"id": "G1"}]
        assert load_records(wrapped) == [{"id": "G2"}]

    def test_rejects_other_shapes(self, tmp_path: Path) -> None:
        from scripts.import_schedule import load_records

        path = tmp_path / "bad.json"
        path.write_text('"nope"', encoding="utf-8")
        with pytest.raises(ValueError):
            load_records(path)
