"""Primality helpers for the card grid.

Plain trial division is plenty at interactive scale: the largest grid is a few
thousand cards and every function here is pure.
"""

from __future__ import annotations


def is_prime(n: int) -> bool:
    if n <= 1:
        return False
    if n <= 3:
        return True
    if n % 2 == 0 or n % 3 == 0:
        return False
    i = 5
    while i * i <= n:
        # Candidates of the form 6k - 1 and 6k + 1.
        if n % i == 0 or n % (i + 2) == 0:
            return False
        i += 6
    return True


def factors_of(n: int) -> list[int]:
    """Return every positive divisor of ``n`` in ascending order.

    ``n <= 0`` has no listed divisors; ``1`` has exactly one.
    """

    if n <= 0:
        return []
    found: set[int] = set()
    i = 1
    while i * i <= n:
        if n % i == 0:
            found.add(i)
            found.add(n // i)
        i += 1
    return sorted(found)


def factor_pairs(n: int) -> list[tuple[int, int]]:
    """Divisor pairs ``(a, n // a)`` with ``a <= n // a``, smallest first."""

    factors = factors_of(n)
    pairs: list[tuple[int, int]] = []
    lo = 0
    hi = len(factors) - 1
    while lo <= hi:
        pairs.append((factors[lo], factors[hi]))
        lo += 1
        hi -= 1
    return pairs


def primes_up_to(limit: int) -> list[int]:
    return [i for i in range(1, limit + 1) if is_prime(i)]


def count_primes_up_to(limit: int) -> int:
    count = 0
    for i in range(1, limit + 1):
        if is_prime(i):
            count += 1
    return count
