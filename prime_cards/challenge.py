"""Challenge engine for the prime card grid.

Free exploration (IDLE) and the timed "find every prime up to N" challenge
share one engine. The phase and the challenge session are held together as a
single tagged state, so session data only exists while a challenge is running
or has just completed:

* ``_Idle``
* ``_Running(session)``
* ``_Completed(session, elapsed_ms)``

The engine never touches pygame. Time comes from an injected ``Clock`` and
the elapsed-time signal from an ``ElapsedTimer`` pumped by ``update()``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from .clock import Clock, IntervalScheduler
from .config import ChallengeConfig, InvalidConfiguration
from .primality import count_primes_up_to, factor_pairs, factors_of, is_prime, primes_up_to
from .progress import CardStatus, ClickRecord, card_status_of
from .timer_service import ElapsedListener, ElapsedTimer, format_elapsed_ms

logger = logging.getLogger(__name__)

__all__ = [
    "ChallengeEngine",
    "ChallengePhase",
    "ChallengeSession",
    "ChallengeSnapshot",
    "InvalidConfiguration",
    "InvalidTransition",
    "build_challenge_engine",
]


class InvalidTransition(RuntimeError):
    """Command not allowed in the current phase."""


class ChallengePhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(slots=True)
class ChallengeSession:
    limit: int
    started_at_s: float
    total_primes: int
    found: set[int] = field(default_factory=set)

    @property
    def found_count(self) -> int:
        return len(self.found)

    @property
    def is_complete(self) -> bool:
        return len(self.found) == self.total_primes


@dataclass(frozen=True, slots=True)
class _Idle:
    phase = ChallengePhase.IDLE


@dataclass(frozen=True, slots=True)
class _Running:
    session: ChallengeSession
    phase = ChallengePhase.RUNNING


@dataclass(frozen=True, slots=True)
class _Completed:
    session: ChallengeSession
    elapsed_ms: int
    phase = ChallengePhase.COMPLETED


_State = _Idle | _Running | _Completed


@dataclass(frozen=True, slots=True)
class ChallengeSnapshot:
    """View model for the presentation layer (pure data)."""

    phase: ChallengePhase
    limit: int | None
    found: frozenset[int]
    total_primes: int
    elapsed_ms: int
    click_record: dict[int, bool]
    sidebar_number: int | None
    sidebar_factors: tuple[int, ...]
    sidebar_pairs: tuple[tuple[int, int], ...]
    grid_size: int

    @property
    def found_count(self) -> int:
        return len(self.found)

    @property
    def elapsed_text(self) -> str:
        return format_elapsed_ms(self.elapsed_ms)

    def card_status(self, n: int) -> CardStatus:
        return card_status_of(self.click_record.get(n))


class ChallengeEngine:
    def __init__(
        self,
        *,
        clock: Clock,
        config: ChallengeConfig | None = None,
        scheduler: IntervalScheduler | None = None,
    ) -> None:
        if scheduler is not None and scheduler.clock is not clock:
            raise ValueError("scheduler must run on the engine clock")
        self._config = ChallengeConfig() if config is None else config
        self._scheduler = IntervalScheduler(clock) if scheduler is None else scheduler
        self._timer = ElapsedTimer(self._scheduler, tick_interval_s=self._config.tick_interval_s)

        self._state: _State = _Idle()
        self._clicks = ClickRecord()
        self._sidebar: int | None = None

    @property
    def config(self) -> ChallengeConfig:
        return self._config

    @property
    def phase(self) -> ChallengePhase:
        return self._state.phase

    @property
    def session(self) -> ChallengeSession | None:
        if isinstance(self._state, (_Running, _Completed)):
            return self._state.session
        return None

    @property
    def clicks(self) -> ClickRecord:
        return self._clicks

    @property
    def sidebar_number(self) -> int | None:
        # Only meaningful while exploring freely.
        if isinstance(self._state, _Idle):
            return self._sidebar
        return None

    @property
    def grid_size(self) -> int:
        session = self.session
        return self._config.default_grid_size if session is None else session.limit

    def grid_numbers(self) -> range:
        return range(1, self.grid_size + 1)

    def elapsed_ms(self) -> int:
        if isinstance(self._state, _Completed):
            return self._state.elapsed_ms
        if isinstance(self._state, _Running):
            return self._timer.elapsed_ms
        return 0

    def remaining_primes(self) -> list[int]:
        session = self.session
        if session is None:
            return []
        return [p for p in primes_up_to(session.limit) if p not in session.found]

    def card_status(self, n: int) -> CardStatus:
        return self._clicks.card_status(n)

    def subscribe_elapsed(self, listener: ElapsedListener) -> Callable[[], None]:
        return self._timer.subscribe(listener)

    def timer_running(self) -> bool:
        return self._timer.running

    # Commands

    def start(self, limit: int) -> None:
        limit = self._config.validate_limit(limit)
        if not isinstance(self._state, _Idle):
            logger.info("abandoning %s challenge to start a new one", self._state.phase.value)
        self._timer.reset()
        self._clicks.clear()
        self._sidebar = None
        self._timer.start()
        started_at_s = self._timer.started_at_s
        assert started_at_s is not None
        session = ChallengeSession(
            limit=limit,
            started_at_s=started_at_s,
            total_primes=count_primes_up_to(limit),
        )
        self._state = _Running(session)
        logger.info("challenge started: limit=%d primes=%d", limit, session.total_primes)

    def restart(self) -> None:
        """Play the just-completed challenge again with the same limit."""

        if not isinstance(self._state, _Completed):
            raise InvalidTransition(f"restart requires a completed challenge, phase is {self.phase.value}")
        self.start(self._state.session.limit)

    def reset(self) -> None:
        if not isinstance(self._state, _Idle):
            logger.info("challenge reset from %s", self._state.phase.value)
        self._timer.reset()
        self._state = _Idle()
        self._clicks.clear()

    def close_sidebar(self) -> None:
        self._sidebar = None

    def click(self, n: int) -> bool:
        """Handle a card click. Returns False when the click is ignored."""

        state = self._state
        if isinstance(state, _Idle):
            prime = is_prime(n)
            self._clicks.record(n, prime)
            self._sidebar = None if prime else n
            return True

        if isinstance(state, _Completed):
            logger.debug("ignored click %d: challenge completed", n)
            return False

        session = state.session
        if n > session.limit or n in session.found or not is_prime(n):
            logger.debug("ignored click %d during challenge", n)
            return False

        session.found.add(n)
        self._clicks.record(n, True)
        if session.is_complete:
            elapsed_ms = self._timer.stop()
            self._state = _Completed(session, elapsed_ms)
            logger.info(
                "challenge completed: limit=%d time=%s",
                session.limit,
                format_elapsed_ms(elapsed_ms),
            )
        return True

    def update(self) -> None:
        """Pump the elapsed-time tick. Call once per frame."""
        self._scheduler.pump()

    def snapshot(self) -> ChallengeSnapshot:
        session = self.session
        sidebar = self.sidebar_number
        return ChallengeSnapshot(
            phase=self.phase,
            limit=None if session is None else session.limit,
            found=frozenset() if session is None else frozenset(session.found),
            total_primes=0 if session is None else session.total_primes,
            elapsed_ms=self.elapsed_ms(),
            click_record=self._clicks.as_dict(),
            sidebar_number=sidebar,
            sidebar_factors=() if sidebar is None else tuple(factors_of(sidebar)),
            sidebar_pairs=() if sidebar is None else tuple(factor_pairs(sidebar)),
            grid_size=self.grid_size,
        )


def build_challenge_engine(*, clock: Clock, config: ChallengeConfig | None = None) -> ChallengeEngine:
    return ChallengeEngine(clock=clock, config=config)
