"""Serialises operator commands and scheduled callbacks onto one consumer."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

from ..catalog.registry import CatalogRegistry
from ..config import AuctionConfig
from .engine import AuctionEngine
from .fanout import SnapshotBroadcaster
from .models import AuctionSnapshot, CommandResult
from .scheduler import LoopScheduler, Scheduler

logger = logging.getLogger(__name__)

COMMANDS = frozenset(
    {"start", "pause", "place_bid", "undo_bid", "sell", "mark_unsold", "skip", "reset"}
)


@dataclass
class _Message:
    callback: Callable[[], Any]
    future: asyncio.Future | None = None


class AuctionRunner:
    """Owns the engine and the single-consumer queue every mutation passes through.

    Operator commands arrive through :meth:`submit`; countdown ticks and
    resolution delays arrive through :meth:`post` (the scheduler's dispatch
    target). Only the consumer task ever touches the engine, so a manual sell
    and an expiring countdown are always applied one after the other.
    """

    def __init__(
        self,
        catalog: CatalogRegistry,
        config: AuctionConfig,
        broadcaster: SnapshotBroadcaster,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._queue: asyncio.Queue[_Message] = asyncio.Queue()
        self._broadcaster = broadcaster
        self._task: asyncio.Task | None = None
        self.engine = AuctionEngine(catalog, config, scheduler or LoopScheduler(self.post))

    async def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._consume())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        while not self._queue.empty():
            message = self._queue.get_nowait()
            if message.future is not None and not message.future.done():
                message.future.cancel()
            self._queue.task_done()

    @property
    def alive(self) -> bool:
        return self._task is not None and not self._task.done()

    def post(self, callback: Callable[[], Any]) -> None:
        self._queue.put_nowait(_Message(callback))

    async def submit(self, command: str, *args: Any) -> CommandResult:
        if command not in COMMANDS:
            raise ValueError(f"unknown command {command}")
        future = asyncio.get_running_loop().create_future()
        handler = getattr(self.engine, command)
        self._queue.put_nowait(_Message(partial(handler, *args), future))
        return await future

    def snapshot(self) -> AuctionSnapshot:
        return self.engine.snapshot()

    async def _consume(self) -> None:
        while True:
            message = await self._queue.get()
            self.process(message)
            self._queue.task_done()

    def process(self, message: _Message) -> None:
        before = self.engine.version
        try:
            result = message.callback()
        except Exception as exc:
            logger.error(f"Auction command failed: {exc}", exc_info=True)
            if message.future is not None and not message.future.done():
                message.future.set_exception(exc)
        else:
            if message.future is not None and not message.future.done():
                message.future.set_result(result)
        if self.engine.version != before:
            self._broadcaster.notify(self.engine.snapshot())
