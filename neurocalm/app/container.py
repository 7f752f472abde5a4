"""Builds the collaborators for one running service and keeps them together."""

from __future__ import annotations

import random
from dataclasses import dataclass

from neurocalm.app.alerts import AlertBus, NotificationLog, StateChangeDetector
from neurocalm.app.heart_core import HistoryBuffer
from neurocalm.app.monitor import StressMonitor
from neurocalm.app.playback import AudioBackend, PlaybackScheduler
from neurocalm.app.recommendations import RecommendationSelector, load_catalog
from neurocalm.app.scheduler import AsyncioClock, Clock
from neurocalm.app.sources import SampleSource, create_source
from neurocalm.coach import CoachResponder, load_script
from neurocalm.config import Settings
from neurocalm.db import UserDirectory, create_directory


@dataclass
class AppContainer:
    settings: Settings
    clock: Clock
    rng: random.Random
    monitor: StressMonitor
    coach: CoachResponder
    directory: UserDirectory

    def make_source(self, name: str, port: str | None = None, baudrate: int | None = None) -> SampleSource:
        return create_source(
            name,
            self.clock,
            rng=self.rng,
            interval=self.settings.sample_interval_sec,
            port=port,
            baudrate=baudrate or self.settings.serial_baudrate,
        )

    def close(self) -> None:
        self.monitor.disconnect()
        self.directory.close()


def build_container(
    settings: Settings | None = None,
    *,
    clock: Clock | None = None,
    rng: random.Random | None = None,
    audio: AudioBackend | None = None,
    directory: UserDirectory | None = None,
) -> AppContainer:
    settings = settings or Settings.from_env()
    clock = clock or AsyncioClock()
    rng = rng or random.Random(settings.rng_seed)

    catalog = load_catalog(settings.catalog_path)
    selector = RecommendationSelector(catalog, rng=rng, calm_recommendations=settings.calm_recommendations)
    playback = PlaybackScheduler(
        clock,
        audio=audio,
        tick_sec=settings.playback_tick_sec,
        increment=settings.playback_increment,
    )
    monitor = StressMonitor(
        clock,
        selector,
        playback,
        history=HistoryBuffer(settings.history_size),
        detector=StateChangeDetector(alert_on_calm=settings.alert_on_calm),
        alert_log=NotificationLog(settings.alert_log_size),
        bus=AlertBus(),
        auto_play_tracks=settings.auto_play_tracks,
    )
    coach = CoachResponder(load_script(settings.responses_path), catalog)
    if directory is None:
        directory = create_directory(settings.db_backend, settings.db_path)

    return AppContainer(
        settings=settings,
        clock=clock,
        rng=rng,
        monitor=monitor,
        coach=coach,
        directory=directory,
    )


__all__ = ["AppContainer", "build_container"]
