"""
Heart-rate sample sources.

Every source shares one contract: ``start(on_sample, on_error)`` begins
emitting samples, ``stop()`` ends it. Stopping is idempotent and releases any
underlying I/O handle exactly once.

Built-in sources (see ``available_sources()``):
  - "synthetic": random walk ticking on the shared clock.
  - "text":      line scraper over text chunks pushed in-process.
  - "serial":    the same scraper reading a pyserial port.
  - "push":      samples handed in one by one (HTTP ingest).
"""

from __future__ import annotations

import asyncio
import math
import random
import re
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Protocol, Type

from loguru import logger

from neurocalm.app.heart_core import HeartRateSample, clamp_simulated
from neurocalm.app.scheduler import Clock, Timer
from neurocalm.errors import NotConnectedError, SourceError, UnknownSourceError

SampleCallback = Callable[[HeartRateSample], None]
ErrorCallback = Callable[[SourceError], None]

INITIAL_BPM = 72
RANDOM_STEP = 3
SPIKE_CHANCE = 0.05
SPIKE_BPM = 15
DIP_CHANCE = 0.05
DIP_BPM = -10

# "Heart Rate: 88", "BPM=91.5", "rate : 77"
HR_LINE_RE = re.compile(r"(?:heart\s*rate|bpm|rate)\s*[:=]\s*(\d+(?:\.\d+)?)", re.IGNORECASE)
FAILURE_RE = re.compile(r"\b(?:failed|failure|error|not\s+found|no\s+sensor)\b", re.IGNORECASE)


class SampleSource(ABC):
    """Unified interface all sample sources implement."""

    name = "source"

    def __init__(self, clock: Clock, **kwargs) -> None:
        self._clock = clock
        self._kwargs = kwargs
        self._on_sample: SampleCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self, on_sample: SampleCallback, on_error: ErrorCallback) -> None:
        if self._running:
            self.stop()
        self._on_sample = on_sample
        self._on_error = on_error
        self._running = True
        try:
            self._start()
        except Exception:
            self._running = False
            raise
        logger.debug("Source {} started", self.name)

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._stop()
        logger.debug("Source {} stopped", self.name)

    @abstractmethod
    def _start(self) -> None: ...

    @abstractmethod
    def _stop(self) -> None: ...

    def _emit(self, bpm: int) -> HeartRateSample:
        sample = HeartRateSample(timestamp=self._clock.now(), bpm=int(bpm))
        if self._on_sample is not None:
            self._on_sample(sample)
        return sample

    def _fail(self, error: SourceError) -> None:
        logger.warning("Source {} reported: {}", self.name, error.message)
        # Fatal: the stream is gone, so stop before notifying.
        if error.fatal:
            self.stop()
        if self._on_error is not None:
            self._on_error(error)


_SOURCE_REGISTRY: Dict[str, Type[SampleSource]] = {}


def register_source(name: str):
    """Decorator to register a concrete SampleSource under a connect name."""
    def deco(cls: Type[SampleSource]) -> Type[SampleSource]:
        _SOURCE_REGISTRY[name.lower()] = cls
        cls.name = name.lower()
        return cls
    return deco


def create_source(name: str, clock: Clock, **kwargs) -> SampleSource:
    key = (name or "").strip().lower()
    if key not in _SOURCE_REGISTRY:
        raise UnknownSourceError(f"Unknown sample source '{name}'. Available: {available_sources()}")
    return _SOURCE_REGISTRY[key](clock, **kwargs)


def available_sources() -> List[str]:
    return sorted(_SOURCE_REGISTRY.keys())


@register_source("synthetic")
class SyntheticSource(SampleSource):
    """
    Random-walk generator: +/-3 bpm per tick, independent 5% spike (+15) and
    5% dip (-10), clamped to the displayable 45-140 range.
    """

    def __init__(
        self,
        clock: Clock,
        rng: random.Random | None = None,
        interval: float = 1.0,
        initial_bpm: int = INITIAL_BPM,
        **kwargs,
    ) -> None:
        super().__init__(clock, **kwargs)
        self._rng = rng or random.Random()
        self.interval = interval
        self.initial_bpm = initial_bpm
        self.bpm = initial_bpm
        self._timer: Timer | None = None

    def next_bpm(self) -> int:
        bpm = self.bpm + self._rng.randint(-RANDOM_STEP, RANDOM_STEP)
        if self._rng.random() < SPIKE_CHANCE:
            bpm += SPIKE_BPM
        if self._rng.random() < DIP_CHANCE:
            bpm += DIP_BPM
        self.bpm = clamp_simulated(bpm)
        return self.bpm

    def _start(self) -> None:
        self.bpm = self.initial_bpm
        self._timer = self._clock.every(self.interval, self._tick, name="synthetic-source")

    def _stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _tick(self) -> None:
        if self._running:
            self._emit(self.next_bpm())


def parse_line(line: str) -> int | SourceError | None:
    """
    Extract a bpm from one serial line.

    Returns the rounded bpm, a non-fatal SourceError when the line reports a
    sensor failure, or None for anything else (noise is not an error).
    """
    match = HR_LINE_RE.search(line)
    if match:
        try:
            return int(round(float(match.group(1))))
        except ValueError:
            return None
    if FAILURE_RE.search(line):
        return SourceError(line.strip(), fatal=False)
    return None


class LineSplitter:
    """Buffers partial text and yields complete lines."""

    def __init__(self) -> None:
        self._buffer = ""

    def feed(self, chunk: str) -> list[str]:
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")
        return [line.rstrip("\r") for line in lines]

    def reset(self) -> None:
        self._buffer = ""

    @property
    def pending(self) -> str:
        return self._buffer


class ChunkReader(Protocol):
    """Async text/byte stream. ``read`` returns None once the stream has ended."""

    async def read(self) -> str | bytes | None: ...

    def close(self) -> None: ...


class QueueChunkReader:
    """In-process chunk stream fed by ``feed``; used for HTTP text ingest and tests."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | bytes | None] = asyncio.Queue()
        self.closed = False

    def feed(self, chunk: str | bytes) -> None:
        if self.closed:
            raise NotConnectedError("Text stream is closed.")
        self._queue.put_nowait(chunk)

    def end(self) -> None:
        """Signal end-of-stream to the reader."""
        self._queue.put_nowait(None)

    async def read(self) -> str | bytes | None:
        if self.closed:
            return None
        return await self._queue.get()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._queue.put_nowait(None)


class SerialChunkReader:
    """pyserial port read off the event loop thread; empty reads are timeouts."""

    def __init__(self, port: str, baudrate: int = 9600, timeout: float = 0.5, chunk_size: int = 256, serial_port=None) -> None:
        self.port_name = port
        self.chunk_size = chunk_size
        self.closed = False
        if serial_port is not None:
            self._port = serial_port
            return
        import serial  # pyserial

        try:
            self._port = serial.Serial(port, baudrate=baudrate, timeout=timeout)
        except serial.SerialException as exc:
            raise SourceError(f"Could not open serial port {port}: {exc}") from exc

    async def read(self) -> bytes | None:
        while not self.closed:
            data = await asyncio.to_thread(self._port.read, self.chunk_size)
            if self.closed:
                return None
            if data:
                return data
        return None

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._port.close()


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class LiveTextSource(SampleSource):
    """
    Scrapes heart-rate values out of a line-oriented text stream.

    One asyncio task awaits chunks from the reader; stopping cancels the task
    and closes the reader (once). A broken or closed stream is reported as a
    fatal SourceError and the partial-line buffer is discarded.
    """

    def __init__(self, clock: Clock, reader: ChunkReader | None = None, **kwargs) -> None:
        super().__init__(clock, **kwargs)
        self.reader = reader
        self._splitter = LineSplitter()
        self._task: asyncio.Task | None = None
        self._reader_closed = False

    def _start(self) -> None:
        if self.reader is None:
            raise SourceError("No text stream attached to this source.")
        self._splitter.reset()
        self._reader_closed = False
        self._task = asyncio.get_running_loop().create_task(self._read_loop(), name=f"{self.name}-reader")

    def _stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and task is not _current_task() and not task.done():
            task.cancel()
        self._splitter.reset()
        self._close_reader()

    def _close_reader(self) -> None:
        if self._reader_closed or self.reader is None:
            return
        self._reader_closed = True
        try:
            self.reader.close()
        except Exception as exc:
            logger.warning("Closing {} stream failed: {}", self.name, exc)

    def _handle_text(self, chunk: str | bytes) -> None:
        if isinstance(chunk, bytes):
            chunk = chunk.decode("utf-8", errors="replace")
        for line in self._splitter.feed(chunk):
            if not self._running:
                return
            parsed = parse_line(line)
            if parsed is None:
                continue
            if isinstance(parsed, SourceError):
                self._fail(parsed)
                continue
            self._emit(parsed)

    async def _read_loop(self) -> None:
        try:
            while self._running:
                try:
                    chunk = await self.reader.read()
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    self._splitter.reset()
                    self._fail(SourceError(f"Stream read failed: {exc}", fatal=True))
                    return
                if not self._running:
                    return
                if chunk is None:
                    self._splitter.reset()
                    self._fail(SourceError("Stream closed.", fatal=True))
                    return
                self._handle_text(chunk)
        finally:
            self._close_reader()


@register_source("text")
class QueueTextSource(LiveTextSource):
    """Live-text source whose chunks are pushed in-process via ``feed``."""

    def __init__(self, clock: Clock, **kwargs) -> None:
        super().__init__(clock, reader=None, **kwargs)

    def _start(self) -> None:
        self.reader = QueueChunkReader()
        super()._start()

    def feed(self, chunk: str) -> None:
        if not self._running or not isinstance(self.reader, QueueChunkReader):
            raise NotConnectedError("Text source is not connected.")
        self.reader.feed(chunk)


@register_source("serial")
class SerialTextSource(LiveTextSource):
    def __init__(self, clock: Clock, port: str | None = None, baudrate: int = 9600, **kwargs) -> None:
        super().__init__(clock, reader=None, **kwargs)
        if not port:
            raise SourceError("A serial port is required for the serial source.")
        self.port = port
        self.baudrate = baudrate

    def _start(self) -> None:
        self.reader = SerialChunkReader(self.port, baudrate=self.baudrate)
        super()._start()


@register_source("push")
class PushSource(SampleSource):
    """Accepts samples handed in by callers (e.g. the /ingest endpoint)."""

    def _start(self) -> None:
        pass

    def _stop(self) -> None:
        pass

    def push(self, bpm: float) -> HeartRateSample:
        if not self._running:
            raise NotConnectedError("Push source is not connected.")
        if not math.isfinite(bpm):
            raise ValueError(f"bpm must be a finite number (got {bpm})")
        return self._emit(int(round(bpm)))


__all__ = [
    "FAILURE_RE",
    "HR_LINE_RE",
    "ChunkReader",
    "LineSplitter",
    "LiveTextSource",
    "PushSource",
    "QueueChunkReader",
    "QueueTextSource",
    "SampleSource",
    "SerialChunkReader",
    "SerialTextSource",
    "SyntheticSource",
    "available_sources",
    "create_source",
    "parse_line",
    "register_source",
]
