"""
Simulated audio playback: one progress counter per track, ticking on the clock.

Only one session plays at a time. Starting a track stops whichever other
track was playing; reaching 100% finishes the session and rewinds it.
Toggling a paused track resumes it from where it stopped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol

from loguru import logger
from pydantic import BaseModel

from neurocalm.app.scheduler import Clock, Timer
from neurocalm.errors import AudioUnavailableError

DEFAULT_TICK_SEC = 0.1
DEFAULT_INCREMENT = 1.0
COMPLETE = 100.0


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass
class PlaybackSession:
    track_id: str
    progress: float = 0.0
    status: PlaybackStatus = PlaybackStatus.IDLE

    @property
    def is_playing(self) -> bool:
        return self.status is PlaybackStatus.PLAYING

    def to_dto(self) -> "PlaybackSessionDTO":
        return PlaybackSessionDTO(
            track_id=self.track_id,
            progress=round(self.progress, 4),
            status=self.status,
            is_playing=self.is_playing,
        )


class PlaybackSessionDTO(BaseModel):
    track_id: str
    progress: float
    status: PlaybackStatus
    is_playing: bool


class AudioBackend(Protocol):
    def play(self, track_id: str) -> None: ...

    def fade_out(self) -> None: ...


class NullAudioBackend:
    """No real audio; the progress counter is the whole contract."""

    def play(self, track_id: str) -> None:
        pass

    def fade_out(self) -> None:
        pass


class PlaybackScheduler:
    def __init__(
        self,
        clock: Clock,
        audio: AudioBackend | None = None,
        tick_sec: float = DEFAULT_TICK_SEC,
        increment: float = DEFAULT_INCREMENT,
        on_finished: Callable[[str], None] | None = None,
    ) -> None:
        if increment <= 0:
            raise ValueError(f"increment must be > 0 (got {increment})")
        self._clock = clock
        self._audio = audio or NullAudioBackend()
        self.tick_sec = tick_sec
        self.increment = increment
        self._on_finished = on_finished
        self._sessions: dict[str, PlaybackSession] = {}
        self._active: str | None = None
        self._timer: Timer | None = None

    @property
    def active_track(self) -> str | None:
        return self._active

    def session(self, track_id: str) -> PlaybackSession | None:
        return self._sessions.get(track_id)

    def sessions(self) -> list[PlaybackSession]:
        return list(self._sessions.values())

    def start(self, track_id: str) -> PlaybackSession:
        if self._active is not None and self._active != track_id:
            self._reset(self._active)
        self._cancel_timer()

        session = self._sessions.setdefault(track_id, PlaybackSession(track_id))
        session.progress = 0.0
        session.status = PlaybackStatus.PLAYING
        self._active = track_id

        self._play(track_id)
        self._timer = self._clock.every(self.tick_sec, self.tick, name="playback")
        logger.info("Playback started: {}", track_id)
        return session

    def toggle(self, track_id: str) -> PlaybackSession:
        session = self._sessions.get(track_id)
        if session is not None and session.is_playing:
            self._cancel_timer()
            session.status = PlaybackStatus.PAUSED
            self._active = None
            self._fade_out()
            logger.info("Playback paused: {} at {:.1f}%", track_id, session.progress)
            return session
        if session is not None and session.status is PlaybackStatus.PAUSED:
            return self._resume(session)
        return self.start(track_id)

    def _resume(self, session: PlaybackSession) -> PlaybackSession:
        if self._active is not None and self._active != session.track_id:
            self._reset(self._active)
        self._cancel_timer()

        session.status = PlaybackStatus.PLAYING
        self._active = session.track_id
        self._play(session.track_id)
        self._timer = self._clock.every(self.tick_sec, self.tick, name="playback")
        logger.info("Playback resumed: {} at {:.1f}%", session.track_id, session.progress)
        return session

    def stop(self) -> None:
        self._cancel_timer()
        if self._active is not None:
            self._reset(self._active)
            self._fade_out()
            logger.info("Playback stopped")

    def tick(self) -> None:
        if self._active is None:
            self._cancel_timer()
            return
        session = self._sessions[self._active]
        session.progress = min(COMPLETE, session.progress + self.increment)
        if session.progress >= COMPLETE:
            track_id = session.track_id
            self._cancel_timer()
            self._reset(track_id)
            logger.info("Playback finished: {}", track_id)
            if self._on_finished is not None:
                self._on_finished(track_id)

    def _reset(self, track_id: str) -> None:
        session = self._sessions.get(track_id)
        if session is not None:
            session.progress = 0.0
            session.status = PlaybackStatus.IDLE
        if self._active == track_id:
            self._active = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _play(self, track_id: str) -> None:
        try:
            self._audio.play(track_id)
        except AudioUnavailableError as exc:
            logger.warning("Audio unavailable for {}; continuing silently: {}", track_id, exc)
        except Exception:
            logger.exception("Audio backend failed to play {}", track_id)

    def _fade_out(self) -> None:
        try:
            self._audio.fade_out()
        except Exception as exc:
            logger.warning("Audio fade-out failed: {}", exc)


__all__ = [
    "AudioBackend",
    "NullAudioBackend",
    "PlaybackScheduler",
    "PlaybackSession",
    "PlaybackSessionDTO",
    "PlaybackStatus",
]
