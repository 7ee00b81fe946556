from __future__ import annotations

import logging
from collections.abc import Callable

from .clock import IntervalHandle, IntervalScheduler

logger = logging.getLogger(__name__)

ElapsedListener = Callable[[int], None]


class ElapsedTimer:
    """Stopwatch that publishes elapsed milliseconds while a challenge runs.

    - ``start()`` captures the start time and schedules a repeating tick.
    - ``stop()`` publishes a final value and freezes it.
    - ``reset()`` drops everything back to zero.

    At most one tick handle is alive at a time, and a tick belonging to a
    superseded handle never publishes.
    """

    def __init__(self, scheduler: IntervalScheduler, *, tick_interval_s: float = 0.1) -> None:
        if tick_interval_s <= 0.0:
            raise ValueError("tick_interval_s must be > 0")
        self._scheduler = scheduler
        self._clock = scheduler.clock
        self._tick_interval_s = float(tick_interval_s)

        self._handle: IntervalHandle | None = None
        self._started_at_s: float | None = None
        self._elapsed_ms = 0
        self._listeners: list[ElapsedListener] = []

    @property
    def running(self) -> bool:
        return self._handle is not None

    @property
    def started_at_s(self) -> float | None:
        return self._started_at_s

    @property
    def elapsed_ms(self) -> int:
        """Last published value."""
        return self._elapsed_ms

    def subscribe(self, listener: ElapsedListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        self._cancel()
        self._started_at_s = self._clock.now()
        self._elapsed_ms = 0
        handle: IntervalHandle | None = None

        def tick() -> None:
            if handle is not self._handle:
                return
            self._publish(self._measure())

        handle = self._scheduler.call_every(self._tick_interval_s, tick)
        self._handle = handle
        logger.debug("elapsed timer started at %.3f", self._started_at_s)

    def stop(self) -> int:
        """Freeze at the current instant. Returns the frozen value."""

        if self._handle is None:
            return self._elapsed_ms
        final_ms = self._measure()
        self._cancel()
        self._publish(final_ms)
        logger.debug("elapsed timer stopped at %d ms", final_ms)
        return final_ms

    def reset(self) -> None:
        self._cancel()
        self._started_at_s = None
        self._elapsed_ms = 0

    def _measure(self) -> int:
        assert self._started_at_s is not None
        # Epsilon absorbs float drift (0.3 s must not read as 299 ms).
        return max(0, int((self._clock.now() - self._started_at_s) * 1000.0 + 1e-6))

    def _publish(self, elapsed_ms: int) -> None:
        self._elapsed_ms = elapsed_ms
        for listener in list(self._listeners):
            listener(elapsed_ms)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def format_elapsed_ms(milliseconds: int | float) -> str:
    """Format as ``MM:SS.T``; every component truncates, nothing rounds up."""

    ms = max(0, int(milliseconds))
    total_seconds = ms // 1000
    tenths = (ms % 1000) // 100
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    return f"{minutes:02d}:{seconds:02d}.{tenths}"
