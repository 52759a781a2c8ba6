"""Delayed callbacks used by the engine for ticks and resolution windows."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> Cancellable: ...


class LoopScheduler:
    """Schedules callbacks on the event loop but runs them through ``dispatch``.

    ``dispatch`` is the command runner's enqueue function, so a timer tick is
    processed in the same serial order as operator commands.
    """

    def __init__(
        self,
        dispatch: Callable[[Callable[[], Any]], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._dispatch = dispatch
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, self._dispatch, callback)
