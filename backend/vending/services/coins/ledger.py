"""
Coin ledger: denomination checks and greedy change decomposition.

All functions are pure. The denomination set is an ascending tuple of positive
integers (minor currency units) loaded once from configuration; every coin must
be a multiple of the smallest one, which guarantees that any amount aligned to
the smallest coin decomposes exactly.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Final

from vending.services._shared.errors import InvalidAmountError, UndecomposableAmountError

DEFAULT_DENOMINATIONS: Final[tuple[int, ...]] = (5, 10, 20, 50, 100)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_denominations(denominations: Iterable[int]) -> tuple[int, ...]:
    """
    Validate a coin set and return it as an immutable tuple.

    :param denominations: Candidate coin values, ascending.
    :returns: The same values as a tuple.
    :raises ValueError: If the set is empty, unsorted, has duplicates or
        non-positive values, or a coin is not a multiple of the smallest coin.
    """
    coins = tuple(denominations)
    if not coins:
        raise ValueError("At least one coin denomination is required.")
    if not all(_is_int(c) and c > 0 for c in coins):
        raise ValueError(f"Denominations must be positive integers: {coins!r}")
    if any(a >= b for a, b in zip(coins, coins[1:])):
        raise ValueError(f"Denominations must be strictly ascending: {coins!r}")
    smallest = coins[0]
    if any(c % smallest for c in coins):
        raise ValueError(
            f"Every denomination must be a multiple of the smallest coin ({smallest}): {coins!r}"
        )
    return coins


def is_valid_denomination(
    amount: object, denominations: Sequence[int] = DEFAULT_DENOMINATIONS
) -> bool:
    """Return ``True`` iff ``amount`` is exactly one accepted coin."""
    return _is_int(amount) and amount in denominations


def is_aligned(amount: int, denominations: Sequence[int] = DEFAULT_DENOMINATIONS) -> bool:
    """Return ``True`` when ``amount`` is a multiple of the smallest coin."""
    return _is_int(amount) and amount % denominations[0] == 0


def decompose_change(
    amount: int, denominations: Sequence[int] = DEFAULT_DENOMINATIONS
) -> tuple[int, ...]:
    """
    Break ``amount`` into coin counts using the greedy algorithm.

    Counts are returned in ascending denomination order (index 0 is the
    smallest coin).

    :param amount: Non-negative amount in minor units.
    :param denominations: Ascending coin set.
    :returns: One count per denomination.
    :raises InvalidAmountError: If ``amount`` is negative or not an integer.
    :raises UndecomposableAmountError: If a remainder is left over.

    >>> decompose_change(950)
    (0, 0, 0, 1, 9)
    """
    if not _is_int(amount) or amount < 0:
        raise InvalidAmountError(f"Change amount must be a non-negative integer, got {amount!r}")

    counts = [0] * len(denominations)
    rest = amount
    for i in range(len(denominations) - 1, -1, -1):
        coin = denominations[i]
        if rest >= coin:
            counts[i], rest = divmod(rest, coin)

    if rest:
        raise UndecomposableAmountError(
            f"Amount {amount} cannot be paid out with coins {tuple(denominations)}"
        )
    return tuple(counts)


def total_of(counts: Sequence[int], denominations: Sequence[int] = DEFAULT_DENOMINATIONS) -> int:
    """Reconstruct the amount represented by ``counts``."""
    if len(counts) != len(denominations):
        raise ValueError("Counts and denominations must have the same length.")
    return sum(n * coin for n, coin in zip(counts, denominations))
