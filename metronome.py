import logging
import time
from dataclasses import dataclass

from utils import DEFAULT_BPM, DEFAULT_METER, DEFAULT_VOLUME, seconds_per_beat

logger = logging.getLogger(__name__)

# how far ahead of "now" beats get committed on each check (seconds)
LOOKAHEAD = 0.1
# how often the loop re-checks (milliseconds); must stay well under LOOKAHEAD
POLL_MS = 25


@dataclass
class Params:
	"""Live metronome parameters. Written by the control surface, read by the scheduler at the moment of use."""
	tempo: float = DEFAULT_BPM
	meter: int = DEFAULT_METER
	volume: float = DEFAULT_VOLUME
	voice_enabled: bool = False


@dataclass(frozen=True)
class Beat:
	index: int
	accented: bool
	deadline: float


class BeatScheduler:
	"""Look-ahead beat scheduler driven by a Tk-style `after` timer.

	Each check emits every beat whose deadline falls before now + LOOKAHEAD, so a late
	timer callback catches up instead of drifting. Tempo is read when the deadline is
	advanced; volume and voice flag are read when a beat is emitted.
	"""

	def __init__(self, host, params, emitter, announcer, clock=time.perf_counter):
		self.host = host
		self.params = params
		self.emitter = emitter
		self.announcer = announcer
		self.clock = clock
		self.running = False
		self.current_beat = 0
		self._generation = 0
		self._after_id = None
		self._next_index = 0
		self._next_deadline = 0.0
		self._listeners = []

	def add_listener(self, func):
		"""`func(beat)` is called with a Beat for each emitted beat, and with None when the scheduler stops."""
		self._listeners.append(func)

	def start(self):
		if self.running:
			self.stop()
		self._generation += 1
		self.running = True
		self._next_index = 0
		self._next_deadline = self.clock()
		logger.debug("Scheduler started (gen %d, %.1f bpm, %d beats)", self._generation, self.params.tempo, self.params.meter)
		self.tick(self._generation)

	def restart(self):
		self.start()

	def stop(self):
		if not self.running:
			return
		self.running = False
		self._generation += 1
		if self._after_id is not None:
			self.host.after_cancel(self._after_id)
			self._after_id = None
		try:
			self.emitter.clear()
		except Exception:
			logger.exception("Dropping queued pulses failed")
		try:
			self.announcer.cancel()
		except Exception:
			logger.exception("Cancelling pending announcements failed")
		self._next_index = 0
		self.current_beat = 0
		logger.debug("Scheduler stopped")
		self._publish(None, self._generation)

	def tick(self, generation):
		if generation != self._generation or not self.running:
			return
		self._after_id = None
		now = self.clock()
		while self._next_deadline <= now + LOOKAHEAD:
			if generation != self._generation:
				return
			index = self._next_index
			beat = Beat(index, index == 0, self._next_deadline)
			if now - beat.deadline > LOOKAHEAD:
				logger.debug("Beat %d missed by %.3fs, skipped", index, now - beat.deadline)
			else:
				self._emit(beat, now, generation)
				if generation != self._generation:
					return
			self._next_index = (index + 1) % self.params.meter
			self._next_deadline += seconds_per_beat(self.params.tempo)
		if generation == self._generation and self.running:
			self._after_id = self.host.after(POLL_MS, self.tick, generation)

	def _emit(self, beat, now, generation):
		volume = self.params.volume
		try:
			# played on the output clock at the beat's deadline, not when it is committed
			self.emitter.emit(beat.accented, volume, max(0.0, beat.deadline - now))
		except Exception:
			logger.exception("Pulse for beat %d failed", beat.index)
		try:
			self.announcer.announce(beat.index, beat.accented, volume, self.params.voice_enabled)
		except Exception:
			logger.exception("Announcement for beat %d failed", beat.index)
		self.current_beat = beat.index
		self._publish(beat, generation)

	def _publish(self, beat, generation):
		for func in list(self._listeners):
			# a listener stopped or restarted the scheduler, the rest must not see this beat
			if generation != self._generation:
				return
			try:
				func(beat)
			except Exception:
				logger.exception("Beat listener %r failed", func)
