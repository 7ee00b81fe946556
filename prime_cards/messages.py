"""Fixed UI text. There is exactly one language."""

from __future__ import annotations

from .progress import CardStatus

TITLE = "Prime Cards"
SUBTITLE = "Click a number to check it: primes turn green, everything else turns red."

CHALLENGE_HEADER = "Challenge Mode"
TIMER_LABEL = "Time"
FOUND_LABEL = "Found"
ABANDON = "Give up"

SIDEBAR_TITLE = "Factors"
ONE_NOTE = "It has only one factor (itself), so it is neither prime nor composite."
PRIME_DEFINITION = (
    "A prime is a natural number greater than 1 that is divisible only by 1 "
    "and itself; in other words it has exactly two positive factors."
)

COMPLETE_TITLE = "Challenge complete!"
RESULT_LABEL = "Your time"
PLAY_AGAIN = "Play again"
NEW_CHALLENGE = "New challenge"


def challenge_button_label(limit: int) -> str:
    return f"Up to {limit}"


def found_counter(found: int, total: int) -> str:
    return f"{found} / {total}"


def sidebar_intro(n: int) -> str:
    return f"{n} is not prime. Its factors are:"


def sidebar_note(n: int) -> str:
    return ONE_NOTE if n == 1 else PRIME_DEFINITION


def complete_body(limit: int) -> str:
    return f"You found every prime up to {limit}!"


def card_label(n: int, status: CardStatus) -> str:
    """Accessible description of a single card."""

    if status is CardStatus.PRIME:
        return f"Number {n}. is prime"
    if status is CardStatus.COMPOSITE:
        return f"Number {n}. is not prime"
    return f"Number {n}. click to check"


def pair_text(a: int, b: int) -> str:
    return f"{a} × {b} = {a * b}"


def checked_tally(primes: int, composites: int) -> str:
    return f"Checked: {primes} prime, {composites} not prime"
