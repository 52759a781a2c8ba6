"""Countdown bound to the live lot."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TimerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXPIRED = "expired"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TimerSnapshot:
    state: TimerState
    remaining: int


class CountdownTimer:
    """Pure countdown state; ticks are delivered by the engine's scheduler.

    ``generation`` changes whenever the countdown is (re)started, stopped or
    reset. A scheduled tick carries the generation it was armed with and is
    ignored once that no longer matches.
    """

    def __init__(self, duration: int) -> None:
        if duration <= 0:
            raise ValueError("timer duration must be positive")
        self.duration = duration
        self.remaining = duration
        self.state = TimerState.IDLE
        self.generation = 0

    def start(self) -> int:
        if self.state == TimerState.EXPIRED:
            raise ValueError("cannot restart an expired timer")
        self.remaining = self.duration
        self.state = TimerState.RUNNING
        self.generation += 1
        return self.generation

    def resume(self) -> int:
        if self.state != TimerState.STOPPED:
            raise ValueError(f"cannot resume a timer in state {self.state.value}")
        self.state = TimerState.RUNNING
        self.generation += 1
        return self.generation

    def stop(self) -> None:
        if self.state != TimerState.EXPIRED:
            self.state = TimerState.STOPPED
        self.generation += 1

    def reset(self) -> None:
        self.remaining = self.duration
        self.state = TimerState.IDLE
        self.generation += 1

    def stop_at_full(self) -> None:
        self.remaining = self.duration
        self.state = TimerState.STOPPED
        self.generation += 1

    def tick(self, generation: int | None = None) -> bool:
        """Advance one step. Returns True only on the Running -> Expired edge."""
        if self.state != TimerState.RUNNING:
            return False
        if generation is not None and generation != self.generation:
            return False
        self.remaining = max(self.remaining - 1, 0)
        if self.remaining == 0:
            self.state = TimerState.EXPIRED
            return True
        return False

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(state=self.state, remaining=self.remaining)
