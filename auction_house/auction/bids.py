"""Bid ledger for the live lot and the increment policy."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence

from .models import Bid


def increment_for(price: int, rules: Iterable[tuple[int, int]]) -> int:
    """Return the increment of the highest threshold that ``price`` has reached."""
    increment = 1
    for threshold, value in sorted(rules):
        if price >= threshold:
            increment = value
    return increment


def next_bid_amount(
    price: int,
    base_price: int,
    has_bids: bool,
    rules: Sequence[tuple[int, int]],
) -> int:
    if not has_bids:
        return base_price
    return price + increment_for(price, rules)


class BidLedger:
    def __init__(self, base_price: int) -> None:
        self.base_price = base_price
        self._entries: list[Bid] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[Bid, ...]:
        """Bids most-recent-first."""
        return tuple(self._entries)

    @property
    def top(self) -> Bid | None:
        return self._entries[0] if self._entries else None

    @property
    def price(self) -> int:
        top = self.top
        return top.amount if top else self.base_price

    @property
    def leader(self) -> int | None:
        top = self.top
        return top.team_id if top else None

    def place(self, team_id: int, amount: int, timestamp: datetime | None = None) -> Bid:
        top = self.top
        if top is None and amount < self.base_price:
            raise ValueError(f"opening bid {amount} is below base price {self.base_price}")
        if top is not None:
            if amount <= top.amount:
                raise ValueError(f"bid {amount} does not exceed current price {top.amount}")
            if top.team_id == team_id:
                raise ValueError(f"team {team_id} is already leading")
        bid = Bid(team_id=team_id, amount=amount, timestamp=timestamp or datetime.now(timezone.utc))
        self._entries.insert(0, bid)
        return bid

    def undo_last(self) -> Bid:
        if not self._entries:
            raise IndexError("no bid to undo")
        return self._entries.pop(0)
