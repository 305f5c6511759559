import pytest

from control import ControlSurface
from utils import MIN_BPM, MAX_BPM


@pytest.fixture
def surface(host, recorder, clock):
    return ControlSurface(host, emitter=recorder, announcer=recorder, clock=clock)


def test_defaults(surface):
    assert surface.params.tempo == 120
    assert surface.params.meter == 4
    assert surface.params.volume == 0.5
    assert surface.params.voice_enabled is False
    assert not surface.running
    assert surface.current_beat == 0


@pytest.mark.parametrize("bpm, expected", [(10, MIN_BPM), (500, MAX_BPM), (96.5, 96.5), (-3, MIN_BPM)])
def test_tempo_is_clamped(surface, bpm, expected):
    assert surface.set_tempo(bpm) == expected
    assert surface.params.tempo == expected


def test_nudge_tempo_stops_at_range(surface):
    surface.set_tempo(MAX_BPM)
    assert surface.nudge_tempo(1) == MAX_BPM
    surface.set_tempo(MIN_BPM)
    assert surface.nudge_tempo(-1) == MIN_BPM
    assert surface.nudge_tempo(1) == MIN_BPM + 1


@pytest.mark.parametrize("beats, expected", [(1, 2), (7, 6), (12, 6), (3, 3), (0, 2)])
def test_meter_snaps_to_choices(surface, beats, expected):
    assert surface.set_meter(beats) == expected


def test_volume_is_clamped(surface):
    assert surface.set_volume(1.7) == 1.0
    assert surface.set_volume(-0.2) == 0.0
    assert surface.set_volume(0.3) == 0.3


def test_running_toggle(surface, recorder, host):
    assert surface.set_running(True)
    assert surface.running
    assert recorder.pulses[0][1] is True
    assert not surface.toggle_running()
    assert host.pending == {}
    assert surface.toggle_running()


def test_set_running_true_twice_does_not_restart(surface, recorder, host):
    surface.set_running(True)
    host.run_until(0.5)
    surface.set_running(True)
    assert surface.current_beat == 1
    assert len(host.pending) == 1


def test_meter_change_while_running_restarts_on_accent(surface, recorder, host):
    surface.set_running(True)
    host.run_until(1.0)
    assert surface.current_beat == 2

    beats = []
    surface.add_listener(beats.append)
    surface.set_meter(3)
    emitted = [b for b in beats if b is not None]
    assert emitted[0].index == 0
    assert emitted[0].accented
    assert emitted[0].deadline == 1.0

    host.run_until(3.0)
    emitted = [b for b in beats if b is not None]
    assert [b.index for b in emitted] == [0, 1, 2, 0, 1]


def test_same_meter_while_running_does_not_restart(surface, host):
    surface.set_running(True)
    host.run_until(1.0)
    surface.set_meter(4)
    assert surface.current_beat == 2


def test_tempo_change_while_running_does_not_restart(surface, host):
    surface.set_running(True)
    host.run_until(1.0)
    generation = surface.scheduler._generation
    surface.set_tempo(240)
    assert surface.scheduler._generation == generation
    assert surface.current_beat == 2
    assert (surface.scheduler._next_index, surface.scheduler._next_deadline) == (3, 1.5)


def test_tempo_change_while_stopped_applies_on_start(surface, host, clock):
    surface.set_tempo(60)
    assert not surface.running
    clock.t = 10.0
    surface.set_running(True)
    host.run_until(12.0)
    assert (surface.scheduler._next_index, surface.scheduler._next_deadline) == (3, 13.0)


def test_meter_change_while_stopped_resets_beat(surface, host):
    surface.set_running(True)
    host.run_until(1.0)
    surface.set_running(False)
    surface.set_meter(6)
    assert not surface.running
    assert surface.current_beat == 0


def test_stop_cancels_speech(surface, recorder, host):
    surface.set_voice_enabled(True)
    surface.set_running(True)
    host.run_until(0.5)
    surface.set_running(False)
    assert recorder.cancels == 1
    assert [a[0] for a in recorder.announced] == [0, 1]


def test_shutdown_stops_and_closes(surface, recorder, host):
    surface.set_running(True)
    surface.shutdown()
    assert not surface.running
    # emitter and announcer both closed
    assert recorder.closed == 2
    assert host.pending == {}
