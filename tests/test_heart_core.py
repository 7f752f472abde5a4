"""Tests for stress classification and the rolling history."""

from datetime import datetime, timedelta, timezone

import pytest

from neurocalm.app.heart_core import (
    HistoryBuffer,
    HeartRateSample,
    StressState,
    clamp_simulated,
    classify,
    is_valid_reading,
)

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize("bpm", [0, 1, 25, 40])
def test_no_reading_classifies_as_normal(bpm):
    assert classify(bpm) is StressState.NORMAL
    assert not is_valid_reading(bpm)


@pytest.mark.parametrize(
    "bpm,expected",
    [
        (41, StressState.NORMAL),
        (79, StressState.NORMAL),
        (80, StressState.MILD),
        (100, StressState.MILD),
        (119, StressState.MILD),
        (120, StressState.HIGH),
        (140, StressState.HIGH),
        (220, StressState.HIGH),
    ],
)
def test_threshold_boundaries(bpm, expected):
    assert classify(bpm) is expected


def test_classification_is_monotonic():
    severities = [classify(bpm).severity for bpm in range(0, 250)]
    assert severities == sorted(severities)


def test_status_labels():
    assert StressState.NORMAL.label == "Relaxed"
    assert StressState.MILD.label == "Mild Stress"
    assert StressState.HIGH.label == "High Stress"


def test_clamp_simulated_range():
    assert clamp_simulated(10) == 45
    assert clamp_simulated(200) == 140
    assert clamp_simulated(90) == 90


def test_history_keeps_last_30_in_order():
    history = HistoryBuffer(30)
    samples = [HeartRateSample(T0 + timedelta(seconds=i), 60 + i) for i in range(1, 36)]
    for sample in samples:
        history.append(sample)
        assert len(history) <= 30

    assert len(history) == 30
    assert history.samples() == samples[5:]
    assert history.samples()[0].bpm == 66
    assert history.latest().bpm == 95


def test_history_clear_and_capacity():
    history = HistoryBuffer(3)
    assert history.capacity == 3
    history.append(HeartRateSample(T0, 70))
    history.clear()
    assert len(history) == 0
    assert history.latest() is None

    with pytest.raises(ValueError):
        HistoryBuffer(0)
