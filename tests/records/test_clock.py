from __future__ import annotations

from services.records.clock import MonotonicClock


def test_clock_never_moves_backwards() -> None:
    readings = iter([100, 250, 90, 300])
    clock = MonotonicClock(source=lambda: next(readings))

    assert [clock() for _ in range(4)] == [100, 250, 250, 300]


def test_default_clock_reports_nanoseconds() -> None:
    assert MonotonicClock()() > 1_600_000_000 * 10**9
