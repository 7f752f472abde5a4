"""
Heart-rate domain: stress classification, samples and the rolling history.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterator

from pydantic import BaseModel, Field

# Readings at or below this are "no data" (0 is the disconnected sentinel).
NO_READING_MAX_BPM = 40
MILD_MIN_BPM = 80
HIGH_MIN_BPM = 120

SIMULATED_MIN_BPM = 45
SIMULATED_MAX_BPM = 140

# Upper bound accepted from pushed samples; anything above is a transport error.
MAX_INGEST_BPM = 300

DEFAULT_HISTORY_SIZE = 30


class StressState(str, Enum):
    NORMAL = "Normal"
    MILD = "Mild"
    HIGH = "High"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_SEVERITY = {StressState.NORMAL: 0, StressState.MILD: 1, StressState.HIGH: 2}
_LABELS = {
    StressState.NORMAL: "Relaxed",
    StressState.MILD: "Mild Stress",
    StressState.HIGH: "High Stress",
}
DISCONNECTED_LABEL = "Disconnected"


def is_valid_reading(bpm: float) -> bool:
    return bpm > NO_READING_MAX_BPM


def classify(bpm: float) -> StressState:
    """Map a bpm value to a stress state. Total and monotonic in bpm."""
    if bpm >= HIGH_MIN_BPM:
        return StressState.HIGH
    if bpm >= MILD_MIN_BPM:
        return StressState.MILD
    return StressState.NORMAL


def clamp_simulated(bpm: int) -> int:
    return max(SIMULATED_MIN_BPM, min(SIMULATED_MAX_BPM, bpm))


@dataclass(frozen=True)
class HeartRateSample:
    timestamp: datetime
    bpm: int

    def to_dto(self) -> "SampleDTO":
        return SampleDTO(timestamp=self.timestamp, bpm=self.bpm)


class HistoryBuffer:
    """
    Bounded, chronological sequence of samples feeding the live chart.

    Eviction is strict FIFO: once ``capacity`` is exceeded the oldest samples
    are dropped first.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_SIZE) -> None:
        if capacity <= 0:
            raise ValueError(f"history capacity must be > 0 (got {capacity})")
        self._samples: deque[HeartRateSample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen or 0

    def append(self, sample: HeartRateSample) -> None:
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()

    def samples(self) -> list[HeartRateSample]:
        return list(self._samples)

    def latest(self) -> HeartRateSample | None:
        return self._samples[-1] if self._samples else None

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[HeartRateSample]:
        return iter(list(self._samples))


class SampleDTO(BaseModel):
    timestamp: datetime
    bpm: int


class HeartIngestRequest(BaseModel):
    bpm: float = Field(..., ge=0, le=MAX_INGEST_BPM, allow_inf_nan=False, description="Heart rate in BPM")


class TextChunkRequest(BaseModel):
    chunk: str = Field(..., description="Raw text as read from the serial line (may hold partial lines).")


class ConnectRequest(BaseModel):
    source: str = Field("synthetic", description="Sample source: synthetic | text | serial | push.")
    port: str | None = Field(None, description="Serial port for the 'serial' source (e.g. /dev/ttyUSB0, COM3).")
    baudrate: int | None = Field(None, description="Serial baud rate; defaults to the configured value.")


__all__ = [
    "DEFAULT_HISTORY_SIZE",
    "DISCONNECTED_LABEL",
    "HIGH_MIN_BPM",
    "MAX_INGEST_BPM",
    "MILD_MIN_BPM",
    "NO_READING_MAX_BPM",
    "SIMULATED_MAX_BPM",
    "SIMULATED_MIN_BPM",
    "ConnectRequest",
    "HeartIngestRequest",
    "HeartRateSample",
    "HistoryBuffer",
    "SampleDTO",
    "StressState",
    "TextChunkRequest",
    "clamp_simulated",
    "classify",
    "is_valid_reading",
]
