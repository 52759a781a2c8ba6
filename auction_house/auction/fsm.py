"""Engine finite state machine."""

from __future__ import annotations

from enum import Enum


class EngineState(str, Enum):
    IDLE = "idle"
    LOT_WAITING = "lot_waiting"
    LOT_ACTIVE = "lot_active"
    RESOLVING = "resolving"
    COMPLETE = "complete"


class EngineEvent(str, Enum):
    LOT_LOADED = "lot_loaded"
    BID_ACCEPTED = "bid_accepted"
    BIDS_CLEARED = "bids_cleared"
    LOT_RESOLVED = "lot_resolved"
    EXHAUSTED = "exhausted"


_TRANSITIONS = {
    (EngineState.IDLE, EngineEvent.LOT_LOADED): EngineState.LOT_WAITING,
    (EngineState.IDLE, EngineEvent.EXHAUSTED): EngineState.COMPLETE,
    (EngineState.LOT_WAITING, EngineEvent.BID_ACCEPTED): EngineState.LOT_ACTIVE,
    (EngineState.LOT_WAITING, EngineEvent.LOT_RESOLVED): EngineState.RESOLVING,
    (EngineState.LOT_ACTIVE, EngineEvent.BID_ACCEPTED): EngineState.LOT_ACTIVE,
    (EngineState.LOT_ACTIVE, EngineEvent.BIDS_CLEARED): EngineState.LOT_WAITING,
    (EngineState.LOT_ACTIVE, EngineEvent.LOT_RESOLVED): EngineState.RESOLVING,
    (EngineState.RESOLVING, EngineEvent.LOT_LOADED): EngineState.LOT_WAITING,
    (EngineState.RESOLVING, EngineEvent.EXHAUSTED): EngineState.COMPLETE,
}


def transition(current: EngineState, event: EngineEvent) -> EngineState:
    try:
        return _TRANSITIONS[(current, event)]
    except KeyError as exc:
        raise ValueError(f"invalid transition from {current} via {event}") from exc
