"""Round-based queue of items awaiting auction."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from typing import Deque, Iterable

from .models import Item, ItemStatus

logger = logging.getLogger(__name__)


class QueueExhausted(LookupError):
    """Raised when neither the current round nor the unsold pool has items left."""


class AuctionQueue:
    """Owns every item record and decides which one goes live next.

    Items drawn in round N and marked unsold wait in the unsold pool until the
    current round's queue is empty; only then are they promoted (and reset to
    available) as round N+1.
    """

    def __init__(self, items: Iterable[Item], *, max_rounds: int | None = None) -> None:
        self._items: dict[int, Item] = {}
        self._pending: Deque[int] = deque()
        self._unsold: list[int] = []
        self._max_rounds = max_rounds
        self.round = 1
        for item in items:
            self._items[item.item_id] = item
            if item.status == ItemStatus.AVAILABLE:
                self._pending.append(item.item_id)
            elif item.status == ItemStatus.UNSOLD:
                self._unsold.append(item.item_id)

    def __len__(self) -> int:
        return len(self._pending)

    def get(self, item_id: int) -> Item:
        return self._items[item_id]

    def all(self, status: ItemStatus | None = None) -> list[Item]:
        if status is None:
            return list(self._items.values())
        return [item for item in self._items.values() if item.status == status]

    def pending(self) -> tuple[int, ...]:
        return tuple(self._pending)

    def unsold(self) -> tuple[int, ...]:
        return tuple(self._unsold)

    def update(self, item: Item) -> None:
        if item.item_id not in self._items:
            raise KeyError(f"item {item.item_id} not found")
        self._items[item.item_id] = item

    def next(self) -> Item:
        """Draw the head of the current round and mark it live."""
        if not self._pending and not self._promote_unsold():
            raise QueueExhausted("no items left to auction")
        item_id = self._pending.popleft()
        item = replace(self._items[item_id], status=ItemStatus.LIVE)
        self._items[item_id] = item
        return item

    def requeue_as_unsold(self, item: Item) -> Item:
        unsold = replace(item, status=ItemStatus.UNSOLD, sold_price=None, team_id=None)
        self._items[item.item_id] = unsold
        self._unsold.append(item.item_id)
        return unsold

    def has_remaining(self) -> bool:
        return bool(self._pending) or (bool(self._unsold) and self._may_promote())

    def _may_promote(self) -> bool:
        return self._max_rounds is None or self.round < self._max_rounds

    def _promote_unsold(self) -> bool:
        if not self._unsold or not self._may_promote():
            return False
        for item_id in self._unsold:
            self._items[item_id] = replace(self._items[item_id], status=ItemStatus.AVAILABLE)
            self._pending.append(item_id)
        self._unsold = []
        self.round += 1
        logger.info("Promoted %d unsold items into round %d", len(self._pending), self.round)
        return True
