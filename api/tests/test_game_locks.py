"""Tests for the per-game write lock registry."""

from __future__ import annotations

import asyncio
import gc

import pytest

from scorekeeper.services.game_locks import GameWriteLocks


class TestGameWriteLocks:
    @pytest.mark.asyncio
    async def test_same_game_is_serialized(self) -> None:
        locks = GameWriteLocks()
        order: list[str] = []

        async def writer(name: str) -> None:
            async with locks.hold("G1"):
                order.append(f"{name}-start")
                await asyncio.sleep(0)
                order.append(f"{name}-end")

        await asyncio.gather(writer("a"), writer("b"))

        assert order == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_different_games_interleave(self) -> None:
        locks = GameWriteLocks()
        order: list[str] = []

        async def writer(game_id: str) -> None:
            async with locks.hold(game_id):
                order.append(f"{game_id}-start")
                await asyncio.sleep(0)
                order.append(f"{game_id}-end")

        await asyncio.gather(writer("G1"), writer("G2"))

        assert order == ["G1-start", "G2-start", "G1-end", "G2-end"]

    @pytest.mark.asyncio
    async def test_disabled_registry_does_not_lock(self) -> None:
        locks = GameWriteLocks(enabled=False)
        order: list[str] = []

        async def writer(name: str) -> None:
            async with locks.hold("G1"):
                order.append(f"{name}-start")
                await asyncio.sleep(0)
                order.append(f"{name}-end")

        await asyncio.gather(writer("a"), writer("b"))

        assert order == ["a-start", "b-start", "a-end", "b-end"]
        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_idle_locks_are_released(self) -> None:
        locks = GameWriteLocks()
        async with locks.hold("G1"):
            assert len(locks) == 1
        gc.collect()
        assert len(locks) == 0
