"""Tests for the simulated playback scheduler."""

import pytest

from neurocalm.app.playback import PlaybackScheduler, PlaybackStatus
from neurocalm.errors import AudioUnavailableError


class RecordingAudio:
    def __init__(self, fail=None):
        self.played = []
        self.fades = 0
        self._fail = fail

    def play(self, track_id):
        if self._fail is not None:
            raise self._fail
        self.played.append(track_id)

    def fade_out(self):
        self.fades += 1


def test_start_plays_from_zero(clock):
    playback = PlaybackScheduler(clock)
    session = playback.start("weightless")

    assert session.is_playing
    assert session.progress == 0.0
    assert playback.active_track == "weightless"


def test_only_one_track_plays_at_a_time(clock):
    playback = PlaybackScheduler(clock)
    playback.start("a")
    clock.advance(1.0)
    playback.start("b")

    a, b = playback.session("a"), playback.session("b")
    assert a.status is PlaybackStatus.IDLE and a.progress == 0.0
    assert b.is_playing
    assert playback.active_track == "b"
    assert clock.active_timers == 1


def test_track_finishes_after_hundred_ticks(clock):
    finished = []
    playback = PlaybackScheduler(clock, on_finished=finished.append)
    playback.start("a")

    clock.advance(9.9)
    assert playback.session("a").progress == pytest.approx(99.0)
    assert finished == []

    clock.advance(0.1)
    session = playback.session("a")
    assert finished == ["a"]
    assert session.status is PlaybackStatus.IDLE
    assert session.progress == 0.0
    assert playback.active_track is None
    assert clock.active_timers == 0


def test_increment_is_configurable(clock):
    playback = PlaybackScheduler(clock, increment=0.5)
    playback.start("a")
    clock.advance(10.0)
    assert playback.session("a").progress == pytest.approx(50.0)
    clock.advance(10.0)
    assert playback.session("a").status is PlaybackStatus.IDLE


def test_invalid_increment_rejected(clock):
    with pytest.raises(ValueError):
        PlaybackScheduler(clock, increment=0)


def test_toggle_pauses_and_resumes(clock):
    audio = RecordingAudio()
    playback = PlaybackScheduler(clock, audio=audio)
    playback.toggle("a")
    clock.advance(2.0)

    paused = playback.toggle("a")
    assert paused.status is PlaybackStatus.PAUSED
    assert paused.progress == pytest.approx(20.0)
    assert audio.fades == 1
    assert clock.active_timers == 0

    clock.advance(5.0)
    assert playback.session("a").progress == pytest.approx(20.0)

    resumed = playback.toggle("a")
    assert resumed.is_playing
    assert resumed.progress == pytest.approx(20.0)
    assert audio.played == ["a", "a"]
    assert playback.active_track == "a"

    clock.advance(1.0)
    assert playback.session("a").progress == pytest.approx(30.0)


def test_resuming_paused_track_stops_other_track(clock):
    playback = PlaybackScheduler(clock)
    playback.start("a")
    clock.advance(3.0)
    playback.toggle("a")
    playback.start("b")
    clock.advance(1.0)

    resumed = playback.toggle("a")
    assert resumed.progress == pytest.approx(30.0)
    assert playback.session("b").status is PlaybackStatus.IDLE
    assert playback.session("b").progress == 0.0
    assert clock.active_timers == 1


def test_start_after_pause_rewinds(clock):
    playback = PlaybackScheduler(clock)
    playback.start("a")
    clock.advance(2.0)
    playback.toggle("a")
    assert playback.start("a").progress == 0.0


def test_stop_resets_active_session(clock):
    audio = RecordingAudio()
    playback = PlaybackScheduler(clock, audio=audio)
    playback.start("a")
    clock.advance(1.0)
    playback.stop()

    assert playback.session("a").progress == 0.0
    assert playback.active_track is None
    assert clock.active_timers == 0
    assert audio.fades == 1

    playback.stop()
    assert audio.fades == 1


def test_audio_failure_does_not_block_progress(clock):
    playback = PlaybackScheduler(clock, audio=RecordingAudio(fail=AudioUnavailableError("no device")))
    playback.start("a")
    clock.advance(1.0)
    assert playback.session("a").progress == pytest.approx(10.0)


def test_unexpected_audio_error_is_absorbed(clock):
    playback = PlaybackScheduler(clock, audio=RecordingAudio(fail=RuntimeError("driver crashed")))
    session = playback.start("a")
    assert session.is_playing


def test_session_dto(clock):
    playback = PlaybackScheduler(clock)
    playback.start("a")
    clock.advance(0.3)
    dto = playback.session("a").to_dto()
    assert dto.track_id == "a"
    assert dto.is_playing
    assert dto.progress == pytest.approx(3.0)
