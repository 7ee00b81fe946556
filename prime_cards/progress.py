from __future__ import annotations

from enum import Enum


class CardStatus(str, Enum):
    NEUTRAL = "neutral"
    PRIME = "prime"
    COMPOSITE = "composite"


def card_status_of(found: bool | None) -> CardStatus:
    """Map a recorded classification (or its absence) to a card colour."""

    if found is None:
        return CardStatus.NEUTRAL
    return CardStatus.PRIME if found else CardStatus.COMPOSITE


class ClickRecord:
    """Which numbers have been clicked, and whether each turned out prime.

    A number is recorded at most once; its classification never changes until
    the record is cleared. Unclicked numbers are absent, not ``False``.
    """

    def __init__(self) -> None:
        self._entries: dict[int, bool] = {}

    def record(self, n: int, is_prime: bool) -> bool:
        """Record ``n``. Returns False if it was already recorded."""

        if n in self._entries:
            return False
        self._entries[int(n)] = bool(is_prime)
        return True

    def status(self, n: int) -> bool | None:
        return self._entries.get(n)

    def card_status(self, n: int) -> CardStatus:
        return card_status_of(self._entries.get(n))

    def clear(self) -> None:
        self._entries.clear()

    def as_dict(self) -> dict[int, bool]:
        return dict(self._entries)

    @property
    def prime_count(self) -> int:
        return sum(1 for v in self._entries.values() if v)

    @property
    def composite_count(self) -> int:
        return sum(1 for v in self._entries.values() if not v)

    def __contains__(self, n: object) -> bool:
        return n in self._entries

    def __len__(self) -> int:
        return len(self._entries)
