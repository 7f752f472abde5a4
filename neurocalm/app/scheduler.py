"""
Clock abstraction driving every periodic callback in the monitor.

All timers (sample generation, playback ticks) subscribe to one clock so the
single-threaded ordering is structural: callbacks run one at a time, in the
order their deadlines fall due.
"""

from __future__ import annotations

import asyncio
import itertools
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable

from loguru import logger

Callback = Callable[[], None]

_EPSILON = 1e-6


class Timer:
    """Handle for a repeating subscription on a clock."""

    def __init__(self, clock: "Clock", interval: float, callback: Callback, seq: int, name: str) -> None:
        self._clock = clock
        self.interval = interval
        self.callback = callback
        self.seq = seq
        self.name = name
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._clock._release(self)

    def __repr__(self) -> str:
        return f"Timer(name={self.name!r}, interval={self.interval}, active={self.active})"


class Clock(ABC):
    def __init__(self) -> None:
        self._timers: set[Timer] = set()
        self._seq = itertools.count()

    @abstractmethod
    def now(self) -> datetime: ...

    @abstractmethod
    def _arm(self, timer: Timer) -> None: ...

    @abstractmethod
    def _disarm(self, timer: Timer) -> None: ...

    def every(self, interval: float, callback: Callback, *, name: str = "timer") -> Timer:
        """Run ``callback`` every ``interval`` seconds until the timer is cancelled."""
        if interval <= 0:
            raise ValueError(f"interval must be > 0 (got {interval})")
        timer = Timer(self, float(interval), callback, next(self._seq), name)
        self._timers.add(timer)
        self._arm(timer)
        return timer

    @property
    def active_timers(self) -> int:
        return len(self._timers)

    def _release(self, timer: Timer) -> None:
        self._timers.discard(timer)
        self._disarm(timer)

    def _fire(self, timer: Timer) -> None:
        try:
            timer.callback()
        except Exception:
            logger.exception("Clock callback {} failed", timer.name)
        if timer.active:
            self._arm(timer)


class AsyncioClock(Clock):
    """Clock backed by ``loop.call_later`` on the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__()
        self._loop = loop
        self._handles: dict[Timer, asyncio.TimerHandle] = {}

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _arm(self, timer: Timer) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self._handles[timer] = loop.call_later(timer.interval, self._on_due, timer)

    def _disarm(self, timer: Timer) -> None:
        handle = self._handles.pop(timer, None)
        if handle is not None:
            handle.cancel()

    def _on_due(self, timer: Timer) -> None:
        self._handles.pop(timer, None)
        if timer.active:
            self._fire(timer)


class ManualClock(Clock):
    """Deterministic clock for tests; time only moves through ``advance``."""

    def __init__(self, start: datetime | None = None) -> None:
        super().__init__()
        self._start = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
        self._elapsed = 0.0
        self._deadlines: dict[Timer, float] = {}

    def now(self) -> datetime:
        return self._start + timedelta(seconds=self._elapsed)

    def _arm(self, timer: Timer) -> None:
        self._deadlines[timer] = self._elapsed + timer.interval

    def _disarm(self, timer: Timer) -> None:
        self._deadlines.pop(timer, None)

    def advance(self, seconds: float) -> None:
        """Move time forward, firing every callback that falls due on the way."""
        target = self._elapsed + seconds
        while True:
            due = [(deadline, t.seq, t) for t, deadline in self._deadlines.items() if deadline <= target + _EPSILON]
            if not due:
                break
            deadline, _, timer = min(due, key=lambda item: (item[0], item[1]))
            self._elapsed = max(self._elapsed, deadline)
            del self._deadlines[timer]
            self._fire(timer)
        self._elapsed = target


__all__ = ["AsyncioClock", "Clock", "ManualClock", "Timer"]
