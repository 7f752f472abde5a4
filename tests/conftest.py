"""Shared fixtures: manual clock, seeded RNGs, catalog and a wired monitor."""

import random

import pytest

from neurocalm.app.alerts import NotificationLog, StateChangeDetector
from neurocalm.app.heart_core import HistoryBuffer
from neurocalm.app.monitor import StressMonitor
from neurocalm.app.playback import PlaybackScheduler
from neurocalm.app.recommendations import RecommendationSelector, load_catalog
from neurocalm.app.scheduler import ManualClock
from neurocalm.config import DEFAULT_CATALOG_PATH, Settings


class ScriptedRandom(random.Random):
    """Random whose randint/random results are fed from fixed scripts."""

    def __init__(self, steps=(), draws=()):
        super().__init__(0)
        self._steps = list(steps)
        self._draws = list(draws)

    def randint(self, a, b):
        return self._steps.pop(0) if self._steps else 0

    def random(self):
        return self._draws.pop(0) if self._draws else 0.99


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def catalog():
    return load_catalog(DEFAULT_CATALOG_PATH)


@pytest.fixture
def selector(catalog, rng):
    return RecommendationSelector(catalog, rng=rng)


@pytest.fixture
def playback(clock):
    return PlaybackScheduler(clock)


@pytest.fixture
def monitor(clock, selector, playback):
    return StressMonitor(
        clock,
        selector,
        playback,
        history=HistoryBuffer(30),
        detector=StateChangeDetector(),
        alert_log=NotificationLog(5),
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(db_backend="memory", db_path=tmp_path / "users.db", rng_seed=42)


@pytest.fixture
def scripted_random():
    return ScriptedRandom
