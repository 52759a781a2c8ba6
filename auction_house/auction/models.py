"""Shared auction data structures."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ItemStatus(str, Enum):
    AVAILABLE = "available"
    LIVE = "live"
    SOLD = "sold"
    UNSOLD = "unsold"


class ResolutionKind(str, Enum):
    SOLD = "sold"
    UNSOLD = "unsold"
    SKIPPED = "skipped"


class Rejection(str, Enum):
    NOT_RUNNING = "not_running"
    ALREADY_RUNNING = "already_running"
    NO_ACTIVE_LOT = "no_active_lot"
    UNKNOWN_TEAM = "unknown_team"
    ALREADY_LEADING = "already_leading"
    INSUFFICIENT_BUDGET = "insufficient_budget"
    TIMER_EXPIRED = "timer_expired"
    NO_BID_TO_UNDO = "no_bid_to_undo"
    NO_LEADER_TO_SELL = "no_leader_to_sell"
    QUEUE_EXHAUSTED = "queue_exhausted"


@dataclass(frozen=True)
class Item:
    item_id: int
    name: str
    base_price: int
    position: str = ""
    nationality: str = ""
    age: int | None = None
    rating: int | None = None
    avatar: str = ""
    status: ItemStatus = ItemStatus.AVAILABLE
    sold_price: int | None = None
    team_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class Team:
    team_id: int
    name: str
    budget: int
    short_name: str = ""
    city: str = ""
    color: str = ""
    logo: str = ""
    spent: int = 0
    players: tuple[int, ...] = ()

    @property
    def remaining(self) -> int:
        return self.budget - self.spent

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["players"] = list(self.players)
        data["remaining"] = self.remaining
        return data


@dataclass(frozen=True)
class Bid:
    team_id: int
    amount: int
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class SaleNotice:
    item_id: int
    item_name: str
    team_id: int
    team_name: str
    price: int


@dataclass(frozen=True)
class Resolution:
    kind: ResolutionKind
    item_id: int


@dataclass(frozen=True)
class AuctionSnapshot:
    """Immutable view of the engine after an accepted transition."""

    version: int
    state: str
    round: int
    live_item: Item | None
    current_price: int
    leader: int | None
    time_remaining: int
    timer_state: str
    bids: tuple[Bid, ...]
    running: bool
    bidding_started: bool
    last_sale: SaleNotice | None = None
    last_resolution: Resolution | None = None
    items: tuple[Item, ...] = field(default_factory=tuple)
    teams: tuple[Team, ...] = field(default_factory=tuple)

    @property
    def bid_count(self) -> int:
        return len(self.bids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "state": self.state,
            "round": self.round,
            "live_item": self.live_item.to_dict() if self.live_item else None,
            "current_price": self.current_price,
            "leader": self.leader,
            "time_remaining": self.time_remaining,
            "timer_state": self.timer_state,
            "bids": [bid.to_dict() for bid in self.bids],
            "bid_count": self.bid_count,
            "running": self.running,
            "bidding_started": self.bidding_started,
            "last_sale": asdict(self.last_sale) if self.last_sale else None,
            "last_resolution": (
                {"kind": self.last_resolution.kind.value, "item_id": self.last_resolution.item_id}
                if self.last_resolution
                else None
            ),
            "items": [item.to_dict() for item in self.items],
            "teams": [team.to_dict() for team in self.teams],
        }


@dataclass(frozen=True)
class CommandResult:
    accepted: bool
    snapshot: AuctionSnapshot
    reason: Rejection | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "accepted": self.accepted,
            "reason": self.reason.value if self.reason else None,
            "state": self.snapshot.to_dict(),
        }
