"""Shared fixtures: a small catalog and a manually advanced scheduler."""

from __future__ import annotations

import heapq
import itertools
from typing import Any, Callable

import pytest

from auction_house.auction.engine import AuctionEngine
from auction_house.catalog.registry import CatalogRegistry
from auction_house.config import AuctionConfig

TEAM_X = 1
TEAM_Y = 2
TEAM_Z = 3


class _ManualHandle:
    def __init__(self, when: float, callback: Callable[[], Any]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for the event loop clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self._heap: list[tuple[float, int, _ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> _ManualHandle:
        handle = _ManualHandle(self.now + delay, callback)
        heapq.heappush(self._heap, (handle.when, next(self._seq), handle))
        return handle

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while self._heap and self._heap[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._heap)
            self.now = when
            if not handle.cancelled:
                handle.callback()
        self.now = target

    def pending(self) -> list[_ManualHandle]:
        return [handle for _, _, handle in self._heap if not handle.cancelled]


def build_catalog(players: list[dict[str, Any]] | None = None) -> CatalogRegistry:
    if players is None:
        players = [
            {"id": 1, "name": "Arjun Mehta", "base_price": 1_500_000},
            {"id": 2, "name": "Priya Nair", "base_price": 1_000_000},
            {"id": 3, "name": "Dmitri Volkov", "base_price": 2_800_000},
        ]
    return CatalogRegistry(
        {
            "teams": [
                {"id": TEAM_X, "name": "Sarvam Spikers", "budget": 10_000_000},
                {"id": TEAM_Y, "name": "Samarpan Storm", "budget": 10_000_000},
                {"id": TEAM_Z, "name": "Dazzling Das", "budget": 1_000_000},
            ],
            "players": players,
        }
    )


@pytest.fixture
def catalog() -> CatalogRegistry:
    return build_catalog()


@pytest.fixture
def auction_config() -> AuctionConfig:
    return AuctionConfig(
        timer_seconds=3,
        tick_seconds=1,
        sale_display_seconds=5,
        unsold_resume_seconds=0.8,
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def engine(catalog, auction_config, scheduler) -> AuctionEngine:
    return AuctionEngine(catalog, auction_config, scheduler)


@pytest.fixture
def running_engine(engine) -> AuctionEngine:
    assert engine.start().accepted
    return engine


def assert_budget_invariants(engine: AuctionEngine) -> None:
    for team in engine.teams.all():
        assert team.spent <= team.budget
        owned = [engine.queue.get(item_id) for item_id in team.players]
        assert team.spent == sum(item.sold_price for item in owned)
        assert all(item.team_id == team.team_id for item in owned)
