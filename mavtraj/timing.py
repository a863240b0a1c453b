"""Named timers collecting wall-clock statistics."""

import math
import time
from collections import deque
from dataclasses import dataclass, field

_ROLLING_WINDOW = 100


@dataclass
class _Accumulator:
    samples: list = field(default_factory=list)
    recent: deque = field(default_factory=lambda: deque(maxlen=_ROLLING_WINDOW))

    def add(self, value):
        self.samples.append(value)
        self.recent.append(value)

    def total(self):
        return math.fsum(self.samples)

    def mean(self):
        return self.total() / len(self.samples) if self.samples else 0.0

    def variance(self):
        if not self.samples:
            return 0.0
        mean = self.mean()
        return math.fsum((s - mean) ** 2 for s in self.samples) / len(self.samples)

    def minimum(self):
        return min(self.samples, default=0.0)

    def maximum(self):
        return max(self.samples, default=0.0)

    def rolling_mean(self):
        return math.fsum(self.recent) / len(self.recent) if self.recent else 0.0


class Timing:
    """Registry of timers addressed by tag or by integer handle."""

    def __init__(self):
        self._tags = {}
        self._timers = []
        self._max_tag_length = 0

    def handle(self, tag):
        """Return the handle for a tag, registering the tag if it is new."""
        existing = self._tags.get(tag)
        if existing is not None:
            return existing
        new_handle = len(self._timers)
        self._tags[tag] = new_handle
        self._timers.append(_Accumulator())
        self._max_tag_length = max(self._max_tag_length, len(tag))
        return new_handle

    def tag(self, handle):
        """Return the tag of a handle, or an empty string if none has it."""
        return next((t for t, h in self._tags.items() if h == handle), "")

    def _accumulator(self, key):
        index = self.handle(key) if isinstance(key, str) else key
        return self._timers[index]

    def add_time(self, handle, seconds):
        self._accumulator(handle).add(float(seconds))

    def total_seconds(self, key):
        return self._accumulator(key).total()

    def mean_seconds(self, key):
        return self._accumulator(key).mean()

    def num_samples(self, key):
        return len(self._accumulator(key).samples)

    def variance_seconds(self, key):
        return self._accumulator(key).variance()

    def min_seconds(self, key):
        return self._accumulator(key).minimum()

    def max_seconds(self, key):
        return self._accumulator(key).maximum()

    def hz(self, key):
        rolling = self._accumulator(key).rolling_mean()
        return 1.0 / rolling if rolling else math.inf

    @staticmethod
    def seconds_to_time_string(seconds):
        return "%09.6f" % seconds

    def report(self):
        """Return a table of all timers sorted by tag; empty if none exist."""
        if not self._tags:
            return ""
        fmt = self.seconds_to_time_string
        lines = ["SM Timing", "-----------"]
        for tag in sorted(self._tags):
            index = self._tags[tag]
            count = self.num_samples(index)
            line = f"{tag:<{self._max_tag_length}}\t{count:>7}\t"
            if count > 0:
                std = math.sqrt(self.variance_seconds(index))
                line += (
                    f"{fmt(self.total_seconds(index))}\t"
                    f"({fmt(self.mean_seconds(index))} +- {fmt(std)})\t"
                    f"[{fmt(self.min_seconds(index))},{fmt(self.max_seconds(index))}]"
                )
            lines.append(line)
        return "\n".join(lines) + "\n"

    def reset(self):
        """Forget all tags."""
        self._tags.clear()


_DEFAULT = Timing()


def default_timing():
    """Return the process-wide timing registry."""
    return _DEFAULT


class Timer:
    """Measures elapsed time and records it in a Timing registry."""

    def __init__(self, tag, start=True, registry=None):
        self.registry = registry if registry is not None else default_timing()
        self.handle = self.registry.handle(tag) if isinstance(tag, str) else tag
        self._started_at = None
        if start:
            self.start()

    def start(self):
        self._started_at = time.perf_counter()

    def stop(self):
        if self._started_at is None:
            raise RuntimeError("timer is not running")
        elapsed = time.perf_counter() - self._started_at
        self._started_at = None
        self.registry.add_time(self.handle, elapsed)
        return elapsed

    def is_timing(self):
        return self._started_at is not None

    def __enter__(self):
        if not self.is_timing():
            self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        if self.is_timing():
            self.stop()
        return False