"""
Stress monitor: wires source -> classifier -> (history, detector) -> selector -> playback.
"""

from __future__ import annotations

from loguru import logger
from pydantic import BaseModel, Field

from neurocalm.app.alerts import AlertBus, AlertEvent, NotificationLog, StateChangeDetector
from neurocalm.app.heart_core import (
    DISCONNECTED_LABEL,
    HeartRateSample,
    HistoryBuffer,
    SampleDTO,
    StressState,
    classify,
)
from neurocalm.app.playback import PlaybackScheduler, PlaybackSessionDTO
from neurocalm.app.recommendations import Recommendation, RecommendationSelector, TrackRecommendation
from neurocalm.app.scheduler import Clock
from neurocalm.app.sources import PushSource, QueueTextSource, SampleSource
from neurocalm.errors import NotConnectedError, SourceError


class MonitorSnapshot(BaseModel):
    connected: bool
    source: str | None = None
    bpm: int = Field(0, description="Latest bpm; 0 means no reading available.")
    state: StressState = StressState.NORMAL
    status: str = DISCONNECTED_LABEL
    history: list[SampleDTO] = Field(default_factory=list)
    alerts: list[AlertEvent] = Field(default_factory=list)
    recommendation: Recommendation | None = None
    last_error: str | None = None
    playback: list[PlaybackSessionDTO] = Field(default_factory=list)


class StressMonitor:
    """Coordinates one live connection and everything downstream of it."""

    def __init__(
        self,
        clock: Clock,
        selector: RecommendationSelector,
        playback: PlaybackScheduler,
        history: HistoryBuffer | None = None,
        detector: StateChangeDetector | None = None,
        alert_log: NotificationLog | None = None,
        bus: AlertBus | None = None,
        auto_play_tracks: bool = False,
    ) -> None:
        self.clock = clock
        self.selector = selector
        self.playback = playback
        self.history = history or HistoryBuffer()
        self.detector = detector or StateChangeDetector()
        self.alert_log = alert_log or NotificationLog()
        self.bus = bus or AlertBus()
        self.auto_play_tracks = auto_play_tracks

        self._source: SampleSource | None = None
        self._bpm = 0
        self._state = StressState.NORMAL
        self.last_alert: AlertEvent | None = None
        self.last_recommendation: Recommendation | None = None
        self.last_error: str | None = None

    @property
    def connected(self) -> bool:
        return self._source is not None

    @property
    def source(self) -> SampleSource | None:
        return self._source

    @property
    def bpm(self) -> int:
        return self._bpm

    @property
    def current_state(self) -> StressState:
        return self._state

    def connect(self, source: SampleSource) -> None:
        # Only one live connection: tear down the previous one first.
        if self._source is not None:
            self.disconnect()

        self.history.clear()
        self.detector.reset()
        self.last_error = None
        self.last_alert = None
        self.last_recommendation = None
        self._bpm = 0
        self._state = StressState.NORMAL

        self._source = source
        try:
            source.start(self.handle_sample, self.handle_error)
        except Exception:
            self._source = None
            raise
        logger.info("Monitor connected to {} source", source.name)

    def disconnect(self) -> None:
        source, self._source = self._source, None
        if source is None:
            return
        source.stop()
        self.detector.reset()
        self.playback.stop()
        self._bpm = 0
        self._state = StressState.NORMAL
        logger.info("Monitor disconnected from {} source", source.name)

    def handle_sample(self, sample: HeartRateSample) -> AlertEvent | None:
        if self._source is None:
            return None

        state = classify(sample.bpm)
        self._bpm = sample.bpm
        self._state = state
        if sample.bpm > 0:
            self.history.append(sample)
        logger.debug("Sample {} bpm -> {}", sample.bpm, state.value)

        alert_state = self.detector.observe(state, sample.bpm)
        if alert_state is None:
            return None

        recommendation = self.selector.select(alert_state)
        if recommendation is None:
            return None

        event = AlertEvent(
            state=alert_state,
            bpm=sample.bpm,
            fired_at=sample.timestamp,
            recommendation=recommendation,
        )
        self.alert_log.add(event)
        self.bus.publish(event)
        self.last_alert = event
        self.last_recommendation = recommendation
        logger.info("{} -> recommending {}", event.message, recommendation.title)

        if self.auto_play_tracks and isinstance(recommendation, TrackRecommendation):
            self.playback.start(recommendation.id)
        return event

    def handle_error(self, error: SourceError) -> None:
        self.last_error = error.message
        logger.warning("Connection error ({}): {}", "fatal" if error.fatal else "reported", error.message)
        self.disconnect()

    def push_sample(self, bpm: float) -> HeartRateSample:
        if not isinstance(self._source, PushSource):
            raise NotConnectedError("No push source is connected.")
        return self._source.push(bpm)

    def feed_text(self, chunk: str) -> None:
        if not isinstance(self._source, QueueTextSource):
            raise NotConnectedError("No text source is connected.")
        self._source.feed(chunk)

    def clear_history(self) -> None:
        self.history.clear()

    def snapshot(self) -> MonitorSnapshot:
        connected = self.connected
        return MonitorSnapshot(
            connected=connected,
            source=self._source.name if self._source else None,
            bpm=self._bpm,
            state=self._state,
            status=self._state.label if connected else DISCONNECTED_LABEL,
            history=[s.to_dto() for s in self.history],
            alerts=self.alert_log.entries(),
            recommendation=self.last_recommendation,
            last_error=self.last_error,
            playback=[s.to_dto() for s in self.playback.sessions()],
        )


__all__ = ["MonitorSnapshot", "StressMonitor"]
