MIN_BPM = 40
MAX_BPM = 240
DEFAULT_BPM = 120
BPM_PRESETS = (60, 90, 120, 140, 180)

METER_CHOICES = (2, 3, 4, 5, 6)
DEFAULT_METER = 4

DEFAULT_VOLUME = 0.5
VOLUME_STEP = 0.1


def clamp(value, lo, hi):
    return max(lo, min(hi, value))

def clamp_tempo(bpm):
    return clamp(float(bpm), MIN_BPM, MAX_BPM)

def clamp_volume(volume):
    return clamp(float(volume), 0.0, 1.0)

def snap_meter(beats):
    """Return the member of METER_CHOICES closest to `beats` (ties go to the smaller one)."""
    beats = int(round(float(beats)))
    return min(METER_CHOICES, key=lambda m: (abs(m - beats), m))

def parse_bpm(text):
    """Parse user-entered tempo text. Returns a clamped BPM or None if the text is not a number."""
    try:
        return clamp_tempo(float(str(text).strip()))
    except ValueError:
        return None

def seconds_per_beat(bpm):
    return 60.0 / float(bpm)
