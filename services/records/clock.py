"""Wall-clock source for record timestamps."""

from __future__ import annotations

import time
from typing import Callable, Protocol


class Clock(Protocol):
    def __call__(self) -> int:
        """Return the current time in nanoseconds since the Unix epoch."""


class MonotonicClock:
    """Wall clock in nanoseconds that never moves backwards.

    A system clock step back (NTP correction, manual change) repeats the last
    reading instead of producing an earlier timestamp.
    """

    def __init__(self, source: Callable[[], int] = time.time_ns) -> None:
        self._source = source
        self._last = 0

    def __call__(self) -> int:
        now = self._source()
        if now < self._last:
            return self._last
        self._last = now
        return now


__all__ = ["Clock", "MonotonicClock"]
