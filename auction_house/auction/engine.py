"""Auction state machine: the single owner of lot, ledger, timer, and queue state."""

from __future__ import annotations

import logging
from functools import partial

from ..catalog.registry import CatalogRegistry
from ..config import AuctionConfig
from .bids import BidLedger, next_bid_amount
from .fsm import EngineEvent, EngineState, transition
from .models import (
    AuctionSnapshot,
    CommandResult,
    Item,
    ItemStatus,
    Rejection,
    Resolution,
    ResolutionKind,
    SaleNotice,
)
from .queue import AuctionQueue, QueueExhausted
from .scheduler import Cancellable, Scheduler
from .teams import TeamLedger
from .timer import CountdownTimer, TimerState

logger = logging.getLogger(__name__)

_LOT_STATES = (EngineState.LOT_WAITING, EngineState.LOT_ACTIVE)


class AuctionEngine:
    """Processes one command at a time and exposes immutable snapshots.

    The engine never blocks and never calls out; delayed work (countdown ticks,
    the sale display window, the short pause after an unsold lot) goes through
    ``scheduler`` and every such callback re-checks the timer generation or the
    lot serial it was armed with, so a late callback is a no-op.
    """

    def __init__(
        self,
        catalog: CatalogRegistry,
        config: AuctionConfig,
        scheduler: Scheduler,
    ) -> None:
        self._catalog = catalog
        self._config = config
        self._scheduler = scheduler
        self.version = 0
        self._state = EngineState.IDLE
        self._lot_serial = 0
        self._tick_handle: Cancellable | None = None
        self._pending_handle: Cancellable | None = None
        self._timer = CountdownTimer(config.timer_seconds)
        self._seed()

    # Read access -----------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    @property
    def timer(self) -> CountdownTimer:
        return self._timer

    @property
    def live_item(self) -> Item | None:
        return self._live

    @property
    def ledger(self) -> BidLedger | None:
        return self._ledger

    @property
    def teams(self) -> TeamLedger:
        return self._teams

    @property
    def queue(self) -> AuctionQueue:
        return self._queue

    def items(self, status: ItemStatus | None = None) -> list[Item]:
        return self._queue.all(status)

    def snapshot(self) -> AuctionSnapshot:
        ledger = self._ledger
        return AuctionSnapshot(
            version=self.version,
            state=self._state.value,
            round=self._queue.round,
            live_item=self._live,
            current_price=ledger.price if ledger is not None else 0,
            leader=ledger.leader if ledger is not None else None,
            time_remaining=self._timer.remaining,
            timer_state=self._timer.state.value,
            bids=ledger.entries if ledger else (),
            running=self._running,
            bidding_started=bool(ledger),
            last_sale=self._last_sale,
            last_resolution=self._last_resolution,
            items=tuple(self._queue.all()),
            teams=tuple(self._teams.all()),
        )

    # Commands --------------------------------------------------------------

    def start(self) -> CommandResult:
        if self._state == EngineState.COMPLETE:
            return self._reject("start", Rejection.QUEUE_EXHAUSTED)
        if self._running:
            return self._reject("start", Rejection.ALREADY_RUNNING)
        if self._state == EngineState.IDLE:
            if not self._queue.has_remaining():
                return self._reject("start", Rejection.QUEUE_EXHAUSTED)
            self._load_next()
            self._running = True
        elif self._state == EngineState.RESOLVING:
            self._cancel_pending()
            self._finish_resolution()
        else:
            self._cancel_pending()
            self._running = True
            if self._ledger and self._ledger.leader is not None:
                if self._timer.state == TimerState.STOPPED:
                    self._arm_tick(self._timer.resume())
            else:
                self._timer.reset()
        return self._accept("start")

    def pause(self) -> CommandResult:
        if not self._running and self._pending_handle is None:
            return self._reject("pause", Rejection.NOT_RUNNING)
        self._running = False
        self._cancel_tick()
        self._cancel_pending()
        if self._state in _LOT_STATES:
            self._timer.stop()
        return self._accept("pause")

    def place_bid(self, team_id: int) -> CommandResult:
        if not self._running:
            return self._reject("place_bid", Rejection.NOT_RUNNING)
        if self._state not in _LOT_STATES or self._ledger is None or self._live is None:
            return self._reject("place_bid", Rejection.NO_ACTIVE_LOT)
        if self._timer.state == TimerState.EXPIRED:
            return self._reject("place_bid", Rejection.TIMER_EXPIRED)
        if self._teams.get(team_id) is None:
            return self._reject("place_bid", Rejection.UNKNOWN_TEAM)
        if self._ledger.leader == team_id:
            return self._reject("place_bid", Rejection.ALREADY_LEADING)
        amount = next_bid_amount(
            self._ledger.price,
            self._live.base_price,
            bool(self._ledger),
            self._config.increments,
        )
        if not self._teams.can_afford(team_id, amount):
            return self._reject("place_bid", Rejection.INSUFFICIENT_BUDGET)
        self._ledger.place(team_id, amount)
        self._cancel_tick()
        self._arm_tick(self._timer.start())
        self._state = transition(self._state, EngineEvent.BID_ACCEPTED)
        logger.info("Bid accepted: item=%s team=%s amount=%d", self._live.item_id, team_id, amount)
        return self._accept("place_bid")

    def undo_bid(self) -> CommandResult:
        if self._state not in _LOT_STATES or self._ledger is None:
            return self._reject("undo_bid", Rejection.NO_ACTIVE_LOT)
        if not self._ledger:
            return self._reject("undo_bid", Rejection.NO_BID_TO_UNDO)
        removed = self._ledger.undo_last()
        self._cancel_tick()
        if not self._ledger:
            self._timer.reset()
            self._state = transition(self._state, EngineEvent.BIDS_CLEARED)
        elif self._running:
            self._arm_tick(self._timer.start())
        else:
            self._timer.stop_at_full()
        logger.info("Bid undone: team=%s amount=%d", removed.team_id, removed.amount)
        return self._accept("undo_bid")

    def sell(self) -> CommandResult:
        if self._state not in _LOT_STATES or self._ledger is None:
            return self._reject("sell", Rejection.NO_ACTIVE_LOT)
        leader = self._ledger.leader
        if leader is None:
            return self._reject("sell", Rejection.NO_LEADER_TO_SELL)
        self._sell(leader)
        return self._accept("sell")

    def mark_unsold(self) -> CommandResult:
        if self._state not in _LOT_STATES:
            return self._reject("mark_unsold", Rejection.NO_ACTIVE_LOT)
        self._resolve_unsold(ResolutionKind.UNSOLD)
        return self._accept("mark_unsold")

    def skip(self) -> CommandResult:
        if self._state not in _LOT_STATES:
            return self._reject("skip", Rejection.NO_ACTIVE_LOT)
        self._resolve_unsold(ResolutionKind.SKIPPED)
        return self._accept("skip")

    def reset(self) -> CommandResult:
        self._cancel_tick()
        self._cancel_pending()
        self._seed()
        self._running = self._load_next()
        return self._accept("reset")

    # Resolution ------------------------------------------------------------

    def _sell(self, team_id: int) -> None:
        price = self._ledger.price
        team = self._teams.get(team_id)
        sold = self._teams.commit(team_id, self._live, price)
        self._queue.update(sold)
        self._live = sold
        self._cancel_tick()
        self._cancel_pending()
        self._timer.stop()
        self._last_sale = SaleNotice(
            item_id=sold.item_id,
            item_name=sold.name,
            team_id=team_id,
            team_name=team.name if team else str(team_id),
            price=price,
        )
        self._last_resolution = Resolution(ResolutionKind.SOLD, sold.item_id)
        self._running = False
        self._state = transition(self._state, EngineEvent.LOT_RESOLVED)
        logger.info("Sold item=%s to team=%s for %d", sold.item_id, team_id, price)
        self._pending_handle = self._scheduler.call_later(
            self._config.sale_display_seconds,
            partial(self._on_sale_window_elapsed, self._lot_serial),
        )

    def _resolve_unsold(self, kind: ResolutionKind) -> None:
        self._cancel_tick()
        self._cancel_pending()
        self._timer.stop()
        unsold = self._queue.requeue_as_unsold(self._live)
        self._last_resolution = Resolution(kind, unsold.item_id)
        self._running = False
        self._state = transition(self._state, EngineEvent.LOT_RESOLVED)
        logger.info("Item %s %s; requeued for round %d", unsold.item_id, kind.value, self._queue.round + 1)
        if self._load_next():
            self._pending_handle = self._scheduler.call_later(
                self._config.unsold_resume_seconds,
                partial(self._on_resume_elapsed, self._lot_serial),
            )

    def _finish_resolution(self) -> None:
        self._last_sale = None
        self._running = self._load_next()

    def _load_next(self) -> bool:
        self._timer.reset()
        try:
            item = self._queue.next()
        except QueueExhausted:
            self._live = None
            self._ledger = None
            self._state = transition(self._state, EngineEvent.EXHAUSTED)
            logger.info("Auction complete after round %d", self._queue.round)
            return False
        self._live = item
        self._ledger = BidLedger(item.base_price)
        self._lot_serial += 1
        self._state = transition(self._state, EngineEvent.LOT_LOADED)
        logger.info("Lot %d live: item=%s base_price=%d", self._lot_serial, item.item_id, item.base_price)
        return True

    # Scheduled callbacks ---------------------------------------------------

    def _on_tick(self, lot_serial: int, generation: int) -> None:
        if (
            lot_serial != self._lot_serial
            or generation != self._timer.generation
            or self._timer.state != TimerState.RUNNING
        ):
            return
        self._tick_handle = None
        expired = self._timer.tick(generation)
        if not expired:
            self._arm_tick(generation)
        elif self._running and self._state == EngineState.LOT_ACTIVE:
            leader = self._ledger.leader if self._ledger else None
            if leader is not None:
                self._sell(leader)
            else:
                self._resolve_unsold(ResolutionKind.UNSOLD)
        self._touch()

    def _on_sale_window_elapsed(self, lot_serial: int) -> None:
        if lot_serial != self._lot_serial or self._state != EngineState.RESOLVING:
            return
        self._pending_handle = None
        self._finish_resolution()
        self._touch()

    def _on_resume_elapsed(self, lot_serial: int) -> None:
        if lot_serial != self._lot_serial or self._state not in _LOT_STATES:
            return
        self._pending_handle = None
        if not self._running:
            self._running = True
            self._touch()

    # Helpers ---------------------------------------------------------------

    def _seed(self) -> None:
        self._teams = TeamLedger(self._catalog.teams())
        self._queue = AuctionQueue(self._catalog.items(), max_rounds=self._config.max_rounds)
        self._timer.reset()
        self._state = EngineState.IDLE
        self._running = False
        self._live: Item | None = None
        self._ledger: BidLedger | None = None
        self._last_sale: SaleNotice | None = None
        self._last_resolution: Resolution | None = None

    def _arm_tick(self, generation: int) -> None:
        self._tick_handle = self._scheduler.call_later(
            self._config.tick_seconds,
            partial(self._on_tick, self._lot_serial, generation),
        )

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _cancel_pending(self) -> None:
        if self._pending_handle is not None:
            self._pending_handle.cancel()
            self._pending_handle = None

    def _touch(self) -> None:
        self.version += 1

    def _accept(self, command: str) -> CommandResult:
        self._touch()
        logger.debug("Command %s accepted (version=%d, state=%s)", command, self.version, self._state.value)
        return CommandResult(accepted=True, snapshot=self.snapshot())

    def _reject(self, command: str, reason: Rejection) -> CommandResult:
        logger.debug("Command %s rejected: %s", command, reason.value)
        return CommandResult(accepted=False, snapshot=self.snapshot(), reason=reason)

