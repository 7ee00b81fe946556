from __future__ import annotations

from dataclasses import dataclass

import pytest

from prime_cards.challenge import (
    ChallengeEngine,
    ChallengePhase,
    InvalidConfiguration,
    InvalidTransition,
    build_challenge_engine,
)
from prime_cards.clock import IntervalScheduler
from prime_cards.config import ChallengeConfig
from prime_cards.progress import CardStatus


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


def _complete_ten(engine: ChallengeEngine) -> None:
    engine.start(10)
    for p in (2, 3, 5, 7):
        engine.click(p)


def test_starts_idle_with_default_grid() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    snap = engine.snapshot()
    assert snap.phase is ChallengePhase.IDLE
    assert snap.limit is None
    assert snap.grid_size == 1000
    assert snap.elapsed_ms == 0
    assert snap.click_record == {}
    assert engine.session is None
    assert list(engine.grid_numbers())[:3] == [1, 2, 3]
    assert engine.grid_numbers()[-1] == 1000


def test_start_creates_session() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.start(50)

    snap = engine.snapshot()
    assert snap.phase is ChallengePhase.RUNNING
    assert snap.limit == 50
    assert snap.total_primes == 15
    assert snap.found == frozenset()
    assert snap.found_count == 0
    assert snap.grid_size == 50
    assert engine.timer_running() is True


def test_running_ignores_composite_without_recording() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.start(50)

    assert engine.click(4) is False
    assert engine.clicks.status(4) is None
    assert 4 not in engine.snapshot().click_record
    assert engine.snapshot().found_count == 0
    assert engine.sidebar_number is None


def test_running_ignores_prime_beyond_limit_and_repeat() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.start(50)

    assert engine.click(53) is False
    assert engine.clicks.status(53) is None

    assert engine.click(2) is True
    assert engine.click(2) is False
    assert engine.click(1) is False
    assert engine.click(0) is False
    assert engine.click(-3) is False

    snap = engine.snapshot()
    assert snap.found == frozenset({2})
    assert snap.click_record == {2: True}


def test_completion_is_atomic_and_freezes_time() -> None:
    clock = FakeClock()
    engine = build_challenge_engine(clock=clock)
    engine.start(10)

    for p in (2, 3, 5):
        clock.advance(0.5)
        assert engine.click(p) is True
        assert engine.phase is ChallengePhase.RUNNING

    clock.advance(0.75)
    assert engine.click(7) is True
    assert engine.phase is ChallengePhase.COMPLETED
    assert engine.timer_running() is False

    frozen = engine.elapsed_ms()
    assert frozen == 2250
    assert engine.snapshot().elapsed_text == "00:02.2"

    clock.advance(30.0)
    engine.update()
    assert engine.elapsed_ms() == frozen
    assert engine.snapshot().elapsed_ms == frozen
    assert engine.snapshot().found == frozenset({2, 3, 5, 7})


def test_clicks_after_completion_are_ignored() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    _complete_ten(engine)

    assert engine.click(4) is False
    assert engine.click(2) is False
    assert engine.snapshot().click_record == {2: True, 3: True, 5: True, 7: True}


def test_idle_click_rules_and_sidebar() -> None:
    engine = build_challenge_engine(clock=FakeClock())

    assert engine.click(1) is True
    snap = engine.snapshot()
    assert snap.click_record[1] is False
    assert snap.sidebar_number == 1
    assert snap.sidebar_factors == (1,)

    assert engine.click(7) is True
    snap = engine.snapshot()
    assert snap.click_record[7] is True
    assert snap.sidebar_number is None

    engine.click(28)
    snap = engine.snapshot()
    assert snap.sidebar_number == 28
    assert snap.sidebar_factors == (1, 2, 4, 7, 14, 28)

    engine.click(12)
    assert engine.sidebar_number == 12

    engine.close_sidebar()
    assert engine.snapshot().sidebar_number is None
    assert engine.snapshot().sidebar_factors == ()


def test_idle_reclick_keeps_classification_and_reopens_sidebar() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.click(9)
    engine.close_sidebar()
    engine.click(9)
    assert engine.clicks.status(9) is False
    assert engine.sidebar_number == 9
    assert len(engine.clicks) == 1


def test_idle_click_outside_grid_is_still_classified() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.click(0)
    assert engine.clicks.status(0) is False
    assert engine.snapshot().sidebar_factors == ()

    engine.click(1009)
    assert engine.clicks.status(1009) is True


def test_start_clears_idle_state() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.click(4)
    engine.click(5)
    assert engine.sidebar_number is None

    engine.click(4)
    engine.start(100)
    snap = engine.snapshot()
    assert snap.click_record == {}
    assert snap.sidebar_number is None

    # Reset back to idle: sidebar stays closed.
    engine.reset()
    assert engine.sidebar_number is None


def test_reset_clears_everything_and_stops_publishing() -> None:
    clock = FakeClock()
    sched = IntervalScheduler(clock)
    engine = ChallengeEngine(clock=clock, scheduler=sched)
    engine.start(50)
    for n in (2, 4, 3, 51, 11):
        clock.advance(0.3)
        engine.click(n)
        engine.update()

    seen: list[int] = []
    engine.subscribe_elapsed(seen.append)
    engine.reset()

    snap = engine.snapshot()
    assert snap.phase is ChallengePhase.IDLE
    assert snap.click_record == {}
    assert snap.limit is None
    assert snap.elapsed_ms == 0
    assert snap.grid_size == 1000
    assert sched.active_count == 0

    for _ in range(10):
        clock.advance(0.1)
        engine.update()
    assert seen == []


def test_reset_from_completed() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    _complete_ten(engine)
    engine.reset()
    assert engine.phase is ChallengePhase.IDLE
    assert engine.snapshot().click_record == {}


def test_restart_uses_previous_limit() -> None:
    clock = FakeClock()
    engine = build_challenge_engine(clock=clock)
    clock.advance(1.0)
    _complete_ten(engine)

    clock.advance(2.0)
    engine.restart()
    snap = engine.snapshot()
    assert snap.phase is ChallengePhase.RUNNING
    assert snap.limit == 10
    assert snap.total_primes == 4
    assert snap.found == frozenset()
    assert snap.click_record == {}
    assert snap.elapsed_ms == 0
    assert engine.session is not None
    assert engine.session.started_at_s == 3.0


@pytest.mark.parametrize("setup", ["idle", "running"])
def test_restart_requires_completed(setup: str) -> None:
    engine = build_challenge_engine(clock=FakeClock())
    if setup == "running":
        engine.start(50)
    with pytest.raises(InvalidTransition):
        engine.restart()


def test_start_while_running_keeps_one_timer() -> None:
    clock = FakeClock()
    sched = IntervalScheduler(clock)
    engine = ChallengeEngine(clock=clock, scheduler=sched)
    seen: list[int] = []
    engine.subscribe_elapsed(seen.append)

    engine.start(50)
    engine.click(2)
    clock.advance(5.0)
    engine.start(100)
    assert sched.active_count == 1
    assert engine.snapshot().found == frozenset()
    assert engine.snapshot().total_primes == 25

    clock.advance(0.25)
    engine.update()
    assert seen == [250]


@pytest.mark.parametrize("limit", [0, -1, 1, True, 2.5, float("inf"), 10**9])
def test_start_rejects_degenerate_limits(limit: object) -> None:
    engine = build_challenge_engine(clock=FakeClock())
    with pytest.raises(InvalidConfiguration):
        engine.start(limit)  # type: ignore[arg-type]
    assert engine.phase is ChallengePhase.IDLE
    assert engine.timer_running() is False


def test_rejected_start_leaves_running_session_alone() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.start(50)
    engine.click(2)
    with pytest.raises(InvalidConfiguration):
        engine.start(0)
    assert engine.phase is ChallengePhase.RUNNING
    assert engine.snapshot().found == frozenset({2})


def test_elapsed_follows_published_ticks_while_running() -> None:
    clock = FakeClock()
    engine = build_challenge_engine(clock=clock)
    engine.start(50)

    clock.advance(1.25)
    engine.update()
    assert engine.elapsed_ms() == 1250
    assert engine.snapshot().elapsed_text == "00:01.2"


def test_remaining_primes_and_card_status() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    assert engine.remaining_primes() == []

    engine.start(20)
    engine.click(2)
    engine.click(13)
    assert engine.remaining_primes() == [3, 5, 7, 11, 17, 19]
    assert engine.card_status(2) is CardStatus.PRIME
    assert engine.card_status(4) is CardStatus.NEUTRAL
    assert engine.snapshot().card_status(13) is CardStatus.PRIME


def test_custom_config_grid_and_limit() -> None:
    cfg = ChallengeConfig(challenge_sizes=(20,), default_grid_size=120, max_limit=200)
    engine = build_challenge_engine(clock=FakeClock(), config=cfg)
    assert engine.grid_size == 120
    with pytest.raises(InvalidConfiguration):
        engine.start(201)
    engine.start(200)
    assert engine.grid_size == 200


def test_scheduler_must_share_the_engine_clock() -> None:
    with pytest.raises(ValueError):
        ChallengeEngine(clock=FakeClock(), scheduler=IntervalScheduler(FakeClock()))

    clock = FakeClock()
    engine = ChallengeEngine(clock=clock, scheduler=IntervalScheduler(clock))
    assert engine.phase is ChallengePhase.IDLE


def test_idle_sidebar_carries_factor_pairs() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.click(28)
    assert engine.snapshot().sidebar_pairs == ((1, 28), (2, 14), (4, 7))
    engine.click(7)
    assert engine.snapshot().sidebar_pairs == ()


def test_snapshot_and_record_agree_on_card_status() -> None:
    engine = build_challenge_engine(clock=FakeClock())
    engine.click(4)
    engine.click(5)
    snap = engine.snapshot()
    for n in (4, 5, 6):
        assert snap.card_status(n) is engine.card_status(n)
