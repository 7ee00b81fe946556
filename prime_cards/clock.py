from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class IntervalHandle:
    """Handle for a repeating callback registered on an IntervalScheduler."""

    def __init__(self, *, interval_s: float, callback: Callable[[], None], next_due_s: float) -> None:
        self._interval_s = float(interval_s)
        self._callback = callback
        self._next_due_s = float(next_due_s)
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    @property
    def interval_s(self) -> float:
        return self._interval_s

    def cancel(self) -> None:
        self._cancelled = True

    def _fire_if_due(self, now: float) -> bool:
        if self._cancelled or now < self._next_due_s:
            return False
        # Catch up without replaying every missed tick.
        while self._next_due_s <= now:
            self._next_due_s += self._interval_s
        self._callback()
        return True


class IntervalScheduler:
    """Cooperative interval timers pumped from the UI loop.

    Nothing runs on its own: the owner calls :meth:`pump` (once per frame in
    the pygame shell) and every due, non-cancelled handle fires at most once.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._handles: list[IntervalHandle] = []

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def active_count(self) -> int:
        return sum(1 for h in self._handles if h.active)

    def call_every(self, interval_s: float, callback: Callable[[], None]) -> IntervalHandle:
        if interval_s <= 0.0:
            raise ValueError("interval_s must be > 0")
        handle = IntervalHandle(
            interval_s=interval_s,
            callback=callback,
            next_due_s=self._clock.now() + float(interval_s),
        )
        self._handles.append(handle)
        return handle

    def pump(self) -> int:
        """Run due callbacks. Returns how many fired."""

        self._handles = [h for h in self._handles if h.active]
        now = self._clock.now()
        fired = 0
        # Snapshot: callbacks may cancel handles or schedule new ones.
        for handle in list(self._handles):
            if handle._fire_if_due(now):
                fired += 1
        return fired
