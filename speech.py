import logging
import queue
import threading
from dataclasses import dataclass

import pyttsx3

logger = logging.getLogger(__name__)

ACCENT_PITCH = 1.3
PLAIN_PITCH = 1.0
# multiplier on the engine's default words-per-minute
SPEECH_RATE = 2.0
DEFAULT_LANG = 'zh'

_STOP = object()


@dataclass(frozen=True)
class SpeechRequest:
    text: str
    volume: float
    pitch: float = PLAIN_PITCH
    rate: float = SPEECH_RATE
    epoch: int = 0


class SpeechWorker:
    """
    Speaks queued requests in order on a daemon thread that owns the pyttsx3 engine.
    The engine is created lazily on that thread the first time something is submitted.
    cancel() drops every request that hasn't been spoken yet.
    """

    def __init__(self, engine_factory=pyttsx3.init, lang=DEFAULT_LANG):
        self._engine_factory = engine_factory
        self.lang = lang
        self._queue = queue.Queue()
        self._lock = threading.Lock()
        self._epoch = 0
        self._thread = None
        self._closed = False
        self.unavailable = False

    @property
    def epoch(self):
        with self._lock:
            return self._epoch

    def submit(self, text, volume, pitch=PLAIN_PITCH, rate=SPEECH_RATE):
        if self._closed or self.unavailable:
            return
        with self._lock:
            self._ensure_thread()
            self._queue.put(SpeechRequest(text, volume, pitch, rate, self._epoch))

    def cancel(self):
        with self._lock:
            self._epoch += 1
            while True:
                try:
                    item = self._queue.get_nowait()
                except queue.Empty:
                    break
                self._queue.task_done()
                if item is _STOP:
                    # keep a pending close() intact
                    self._queue.put(_STOP)
                    break

    def close(self, timeout=1.0):
        self._closed = True
        self.cancel()
        if self._thread is not None:
            self._queue.put(_STOP)
            self._thread.join(timeout=timeout)
            self._thread = None

    def _ensure_thread(self):
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self._run, name='speech-worker', daemon=True)
            self._thread.start()

    def _run(self):
        engine, base = self._open_engine()
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if engine is None or item.epoch != self.epoch:
                    continue
                self._speak(engine, base, item)
            finally:
                self._queue.task_done()

    def _open_engine(self):
        """Returns (engine, base properties), or (None, {}) when no speech driver works."""
        try:
            engine = self._engine_factory()
            self._select_voice(engine)
            base = self._base_properties(engine)
        except Exception as e:
            logger.warning("Speech output unavailable, voice counting is muted: %s", e)
            self.unavailable = True
            return None, {}
        return engine, base

    def _select_voice(self, engine):
        if not self.lang:
            return
        try:
            voices = engine.getProperty('voices') or []
        except Exception as e:
            logger.debug("Could not list voices: %s", e)
            return
        lang = self.lang.lower()
        for voice in voices:
            langs = [l.decode(errors='ignore') if isinstance(l, bytes) else str(l) for l in (getattr(voice, 'languages', None) or [])]
            if any(lang in l.lower() for l in langs) or lang in str(getattr(voice, 'id', '')).lower():
                engine.setProperty('voice', voice.id)
                logger.debug("Using voice %s for language %s", voice.id, self.lang)
                return
        logger.info("No '%s' voice installed, using the default voice", self.lang)

    def _base_properties(self, engine):
        base = {'rate': engine.getProperty('rate')}
        try:
            base['pitch'] = engine.getProperty('pitch')
        except KeyError:
            logger.debug("Speech driver has no pitch control")
        return base

    def _speak(self, engine, base, request):
        try:
            engine.setProperty('volume', request.volume)
            if base.get('rate'):
                engine.setProperty('rate', int(base['rate'] * request.rate))
            if base.get('pitch') is not None:
                engine.setProperty('pitch', base['pitch'] * request.pitch)
            engine.say(request.text)
            engine.runAndWait()
        except Exception as e:
            logger.warning("Speech request %r failed: %s", request.text, e)


class Announcer:
    """Speaks the 1-based beat number when voice counting is on. Never blocks the caller."""

    def __init__(self, worker=None):
        self.worker = worker if worker is not None else SpeechWorker()

    def announce(self, beat_index, accented, volume, enabled):
        if not enabled:
            return
        pitch = ACCENT_PITCH if accented else PLAIN_PITCH
        self.worker.submit(str(beat_index + 1), volume, pitch=pitch, rate=SPEECH_RATE)

    def cancel(self):
        self.worker.cancel()

    def close(self):
        self.worker.close()
