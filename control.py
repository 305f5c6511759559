import logging

from audio_utils import PulseEmitter
from metronome import BeatScheduler, Params
from speech import Announcer
from utils import clamp_tempo, clamp_volume, snap_meter

logger = logging.getLogger(__name__)


class ControlSurface:
    """
    The metronome's parameter store. Every setter clamps its input before the
    scheduler can see it, and applies the restart rules:
    meter change while running restarts at beat 0, tempo change while running
    only retimes the beats after the pending one.
    """

    def __init__(self, host, params=None, emitter=None, announcer=None, clock=None):
        self.params = params if params is not None else Params()
        self.emitter = emitter if emitter is not None else PulseEmitter()
        self.announcer = announcer if announcer is not None else Announcer()
        kwargs = {'clock': clock} if clock is not None else {}
        self.scheduler = BeatScheduler(host, self.params, self.emitter, self.announcer, **kwargs)

    @property
    def running(self):
        return self.scheduler.running

    @property
    def current_beat(self):
        return self.scheduler.current_beat

    def add_listener(self, func):
        self.scheduler.add_listener(func)

    def set_tempo(self, bpm):
        self.params.tempo = clamp_tempo(bpm)
        logger.debug("Tempo set to %.1f", self.params.tempo)
        return self.params.tempo

    def nudge_tempo(self, delta):
        return self.set_tempo(self.params.tempo + delta)

    def set_meter(self, beats):
        meter = snap_meter(beats)
        changed = meter != self.params.meter
        self.params.meter = meter
        if changed and self.running:
            self.scheduler.restart()
        return meter

    def set_volume(self, volume):
        self.params.volume = clamp_volume(volume)
        return self.params.volume

    def set_voice_enabled(self, enabled):
        self.params.voice_enabled = bool(enabled)
        return self.params.voice_enabled

    def set_running(self, running):
        if running and not self.running:
            self.scheduler.start()
        elif not running:
            self.scheduler.stop()
        return self.running

    def toggle_running(self):
        return self.set_running(not self.running)

    def shutdown(self):
        self.scheduler.stop()
        self.emitter.close()
        self.announcer.close()
