import pytest


class FakeClock:
    def __init__(self, t=0.0):
        self.t = t

    def __call__(self):
        return self.t


class FakeHost:
    """Stands in for the Tk root: records after() callbacks and fires them when the clock reaches them."""

    def __init__(self, clock):
        self.clock = clock
        self.pending = {}
        self._next_id = 0

    def after(self, ms, func, *args):
        self._next_id += 1
        after_id = f"after#{self._next_id}"
        self.pending[after_id] = (self.clock.t + ms / 1000.0, func, args)
        return after_id

    def after_cancel(self, after_id):
        self.pending.pop(after_id, None)

    def run_until(self, t, delay=0.0):
        """Advance the clock to `t`, firing due callbacks (each one `delay` seconds late)."""
        while True:
            due = [(when, k) for k, (when, _, _) in self.pending.items() if when + delay <= t]
            if not due:
                break
            when, after_id = min(due)
            _, func, args = self.pending.pop(after_id)
            self.clock.t = max(self.clock.t, when + delay)
            func(*args)
        self.clock.t = max(self.clock.t, t)


class Recorder:
    """Collects pulses and announcements."""

    def __init__(self, clock):
        self.clock = clock
        self.pulses = []
        self.delays = []
        self.announced = []
        self.cancels = 0
        self.clears = 0
        self.closed = 0

    def emit(self, accented, volume, delay=0.0):
        self.pulses.append((self.clock.t, accented, volume))
        self.delays.append(delay)

    def clear(self):
        self.clears += 1

    def announce(self, beat_index, accented, volume, enabled):
        if enabled:
            self.announced.append((beat_index, accented, volume))

    def cancel(self):
        self.cancels += 1

    def close(self):
        self.closed += 1


@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def host(clock):
    return FakeHost(clock)

@pytest.fixture
def recorder(clock):
    return Recorder(clock)
