"""Unit tests for the countdown timer state machine."""

from __future__ import annotations

import pytest

from auction_house.auction.timer import CountdownTimer, TimerSnapshot, TimerState


class TestCountdownTimer:
    def test_starts_idle_at_full_duration(self):
        timer = CountdownTimer(3)
        assert timer.snapshot() == TimerSnapshot(TimerState.IDLE, 3)

    def test_tick_in_idle_does_nothing(self):
        timer = CountdownTimer(3)
        assert timer.tick() is False
        assert timer.remaining == 3

    def test_start_resets_to_full_duration(self):
        timer = CountdownTimer(3)
        timer.start()
        timer.tick()
        assert timer.remaining == 2
        timer.start()
        assert timer.snapshot() == TimerSnapshot(TimerState.RUNNING, 3)

    def test_expiry_is_edge_triggered(self):
        timer = CountdownTimer(2)
        generation = timer.start()
        assert timer.tick(generation) is False
        assert timer.tick(generation) is True
        assert timer.state == TimerState.EXPIRED
        assert timer.tick(generation) is False
        assert timer.tick() is False
        assert timer.remaining == 0

    def test_stale_generation_is_ignored(self):
        timer = CountdownTimer(3)
        stale = timer.start()
        timer.start()
        assert timer.tick(stale) is False
        assert timer.remaining == 3

    def test_stop_retains_value_and_resume_continues(self):
        timer = CountdownTimer(3)
        timer.start()
        timer.tick()
        timer.stop()
        assert timer.snapshot() == TimerSnapshot(TimerState.STOPPED, 2)
        assert timer.tick() is False
        timer.resume()
        assert timer.snapshot() == TimerSnapshot(TimerState.RUNNING, 2)

    def test_expired_is_terminal_until_reset(self):
        timer = CountdownTimer(1)
        timer.start()
        assert timer.tick() is True
        timer.stop()
        assert timer.state == TimerState.EXPIRED
        with pytest.raises(ValueError):
            timer.start()
        timer.reset()
        assert timer.snapshot() == TimerSnapshot(TimerState.IDLE, 1)

    def test_resume_requires_stopped(self):
        with pytest.raises(ValueError):
            CountdownTimer(3).resume()

    def test_rejects_non_positive_duration(self):
        with pytest.raises(ValueError):
            CountdownTimer(0)
