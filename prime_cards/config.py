from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

SIZES_ENV = "PRIME_CARDS_SIZES"
GRID_SIZE_ENV = "PRIME_CARDS_GRID_SIZE"
TICK_MS_ENV = "PRIME_CARDS_TICK_MS"
MAX_LIMIT_ENV = "PRIME_CARDS_MAX_LIMIT"
LOG_LEVEL_ENV = "PRIME_CARDS_LOG_LEVEL"


class InvalidConfiguration(ValueError):
    """A challenge size or setting that cannot produce a sensible session."""


@dataclass(frozen=True, slots=True)
class ChallengeConfig:
    # Sizes offered by the challenge menu.
    challenge_sizes: tuple[int, ...] = (50, 100, 300)
    default_grid_size: int = 1000
    tick_interval_s: float = 0.1
    # Upper bound for start(limit); keeps the grid and prime count interactive.
    max_limit: int = 5000

    def __post_init__(self) -> None:
        if self.max_limit < 2:
            raise InvalidConfiguration("max_limit must be >= 2")
        if not self.challenge_sizes:
            raise InvalidConfiguration("challenge_sizes must not be empty")
        for size in self.challenge_sizes:
            if size < 2 or size > self.max_limit:
                raise InvalidConfiguration(f"challenge size {size} must be in [2, {self.max_limit}]")
        if self.default_grid_size <= 0:
            raise InvalidConfiguration("default_grid_size must be > 0")
        if self.tick_interval_s <= 0.0:
            raise InvalidConfiguration("tick_interval_s must be > 0")

    def validate_limit(self, limit: object) -> int:
        # bool is an int subclass; True is not a challenge size.
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise InvalidConfiguration(f"limit must be an integer, got {limit!r}")
        if limit < 2:
            # Below 2 there is no prime to find.
            raise InvalidConfiguration(f"limit must be >= 2, got {limit}")
        if limit > self.max_limit:
            raise InvalidConfiguration(f"limit must be <= {self.max_limit}, got {limit}")
        return limit

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ChallengeConfig":
        env = os.environ if environ is None else environ
        defaults = cls()

        sizes = defaults.challenge_sizes
        raw_sizes = env.get(SIZES_ENV, "").strip()
        if raw_sizes:
            sizes = tuple(_parse_int(SIZES_ENV, part) for part in raw_sizes.split(",") if part.strip())

        grid = defaults.default_grid_size
        raw_grid = env.get(GRID_SIZE_ENV, "").strip()
        if raw_grid:
            grid = _parse_int(GRID_SIZE_ENV, raw_grid)

        tick_s = defaults.tick_interval_s
        raw_tick = env.get(TICK_MS_ENV, "").strip()
        if raw_tick:
            tick_s = _parse_int(TICK_MS_ENV, raw_tick) / 1000.0

        max_limit = defaults.max_limit
        raw_max = env.get(MAX_LIMIT_ENV, "").strip()
        if raw_max:
            max_limit = _parse_int(MAX_LIMIT_ENV, raw_max)

        return cls(
            challenge_sizes=sizes,
            default_grid_size=grid,
            tick_interval_s=tick_s,
            max_limit=max_limit,
        )


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise InvalidConfiguration(f"{name} must be an integer, got {raw!r}") from None
