"""
Time-Related Utilities
----------------------

The vault never reads wall-clock time directly. A ``Clock`` is injected and
read exactly once per outermost call, so every step of a call (or of a
``multicall`` batch) sees the same timestamp.

- SystemClock: whole seconds since the epoch, for live use.
- ManualClock: a settable clock for simulations and tests.
"""

import time
from typing import Protocol


class Clock(Protocol):
    def now(self) -> int:
        ...


class SystemClock:
    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError("Clock start must be non-negative.")
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def set(self, ts: int) -> None:
        if ts < self._now:
            raise ValueError(f"Clock cannot move backwards ({ts} < {self._now}).")
        self._now = int(ts)

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("Cannot advance by a negative duration.")
        self._now += int(seconds)
        return self._now
