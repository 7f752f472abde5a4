"""
State-change detection, the bounded notification log and the alert bus.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import deque
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from neurocalm.app.heart_core import StressState, is_valid_reading
from neurocalm.app.recommendations import Recommendation

DEFAULT_ALERT_LOG_SIZE = 5


class AlertEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    state: StressState
    bpm: int
    fired_at: datetime
    recommendation: Recommendation | None = None

    @property
    def message(self) -> str:
        return f"ALERT: {self.state.value} Stress Detected ({self.bpm} BPM)."


class StateChangeDetector:
    """
    Turns a classified stream into de-duplicated alert decisions.

    - Normal readings re-arm the detector and never alert (unless
      ``alert_on_calm`` is set and we are coming down from Mild/High).
    - A non-Normal state alerts once when it differs from the previous state.
    - Repeats of the same state stay silent.
    - "No reading" values (<= 40 bpm) are ignored entirely.
    """

    def __init__(self, alert_on_calm: bool = False) -> None:
        self.alert_on_calm = alert_on_calm
        self.last_state = StressState.NORMAL

    def observe(self, state: StressState, bpm: float) -> StressState | None:
        if not is_valid_reading(bpm):
            return None

        previous = self.last_state
        self.last_state = state

        if state is StressState.NORMAL:
            if self.alert_on_calm and previous is not StressState.NORMAL:
                return state
            return None
        if state is not previous:
            return state
        return None

    def reset(self) -> None:
        self.last_state = StressState.NORMAL


class NotificationLog:
    """Most recent alerts, newest first; the oldest drop off past ``capacity``."""

    def __init__(self, capacity: int = DEFAULT_ALERT_LOG_SIZE) -> None:
        if capacity <= 0:
            raise ValueError(f"alert log capacity must be > 0 (got {capacity})")
        self._events: deque[AlertEvent] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._events.maxlen or 0

    def add(self, event: AlertEvent) -> None:
        # appendleft on a bounded deque discards from the right (the oldest).
        self._events.appendleft(event)

    def entries(self) -> list[AlertEvent]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)


class AlertBus:
    """Async queue of alerts; can be replaced with a broker without changing callers."""

    def __init__(self, maxsize: int = 100) -> None:
        self._queue: asyncio.Queue[AlertEvent] = asyncio.Queue(maxsize=maxsize)

    def publish(self, event: AlertEvent) -> None:
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(event)

    async def poll(self) -> AlertEvent:
        return await self._queue.get()

    async def next(self, timeout: float) -> AlertEvent | None:
        """Wait up to ``timeout`` seconds for the next alert; None if none arrived."""
        if not self._queue.empty():
            return self._queue.get_nowait()
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def pending(self) -> int:
        return self._queue.qsize()


__all__ = [
    "DEFAULT_ALERT_LOG_SIZE",
    "AlertBus",
    "AlertEvent",
    "NotificationLog",
    "StateChangeDetector",
]
