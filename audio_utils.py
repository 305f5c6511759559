import logging
import threading
import numpy as np

try:
    import sounddevice as sd
except (ImportError, OSError):
    # OSError: the sounddevice wheel is installed but PortAudio is missing
    sd = None

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
F_ACCENT = 1000.0
F_PLAIN = 800.0
TONE_DURATION = 0.05
FADE_SECONDS = 0.002


def make_tone(freq, duration=TONE_DURATION, fs=SAMPLE_RATE):
    """
    Render a short sine pulse at unit amplitude.
    Exponential decay envelope with a tiny linear fade at both ends so the pulse doesn't click.
    """
    n = int(fs * duration)
    t = np.arange(n, dtype=np.float32) / fs
    env = np.exp(-20 * t)
    fade = min(n // 2, int(fs * FADE_SECONDS))
    if fade > 0:
        ramp = np.linspace(0.0, 1.0, fade, dtype=np.float32)
        env[:fade] *= ramp
        env[-fade:] *= ramp[::-1]
    return (np.sin(2 * np.pi * freq * t) * env).astype('float32')


class PulseEmitter:
    """
    Plays the metronome tick on one long-lived output stream.
    emit() only queues a pulse at a sample offset; the stream callback mixes queued pulses
    into each block, so pulses never cut each other off and land on their deadline.
    """

    def __init__(self, fs=SAMPLE_RATE, device=None):
        self.fs = fs
        self.device = device
        self._accent = make_tone(F_ACCENT, fs=fs)
        self._plain = make_tone(F_PLAIN, fs=fs)
        self._stream = None
        self._lock = threading.Lock()
        self._pending = []
        self._frame = 0
        self._warned = False

    def tone(self, accented):
        return self._accent if accented else self._plain

    def emit(self, accented, volume, delay=0.0):
        """Queue one pulse to start `delay` seconds from now."""
        if volume <= 0:
            return
        if not self._open_stream():
            return
        pulse = self.tone(accented) * np.float32(volume)
        with self._lock:
            start = self._frame + max(0, int(round(delay * self.fs)))
            self._pending.append((start, pulse))

    def clear(self):
        """Drop pulses that haven't started playing yet."""
        with self._lock:
            self._pending = [(at, p) for at, p in self._pending if at < self._frame]

    def close(self):
        with self._lock:
            self._pending = []
        if self._stream is not None:
            try:
                self._stream.stop()
                self._stream.close()
            except Exception as e:
                logger.debug("Closing output stream failed: %s", e)
            self._stream = None

    def _open_stream(self):
        if self._stream is not None:
            return True
        if sd is None:
            self._output_unavailable("sounddevice/PortAudio not available")
            return False
        try:
            stream = sd.OutputStream(samplerate=self.fs, channels=1, dtype='float32',
                                     device=self.device, callback=self._callback)
            stream.start()
        except Exception as e:
            self._output_unavailable(e)
            return False
        self._stream = stream
        return True

    def _callback(self, outdata, frames, time_info, status):
        if status:
            logger.debug("Output stream status: %s", status)
        outdata.fill(0)
        with self._lock:
            start = self._frame
            end = start + frames
            keep = []
            for at, pulse in self._pending:
                if at < end:
                    # pulse may have begun in an earlier block
                    src = max(0, start - at)
                    dst = max(0, at - start)
                    n = min(len(pulse) - src, frames - dst)
                    if n > 0:
                        outdata[dst:dst + n, 0] += pulse[src:src + n]
                if at + len(pulse) > end:
                    keep.append((at, pulse))
            self._pending = keep
            self._frame = end
        np.clip(outdata, -1.0, 1.0, out=outdata)

    def _output_unavailable(self, reason):
        if not self._warned:
            logger.warning("Audio output unavailable, ticks are muted: %s", reason)
            self._warned = True
        else:
            logger.debug("Skipped tick: %s", reason)
