"""Parsing utilities for snapshot amounts and weights."""

from collections.abc import Iterable, Mapping

from genesis_builder.helpers.constants import MAX_BALANCE
from genesis_builder.helpers.exceptions import IntegrityError


def parse_weight(value: str | int) -> int:
    """Parse an arbitrary-precision weight encoded as a decimal string.

    Args:
        value: Decimal string (or int) weight

    Returns:
        int: Parsed weight

    Raises:
        ValueError: If the value is not a non-negative integer

    Example:
        >>> parse_weight("340282366920938463463374607431768211455")
        340282366920938463463374607431768211455
        >>> parse_weight(10)
        10
    """
    if isinstance(value, bool):
        msg = f"Weight must be an integer, got {value!r}"
        raise ValueError(msg)
    if isinstance(value, int):
        weight = value
    elif isinstance(value, str) and value.isdigit() and value.isascii():
        weight = int(value)
    else:
        msg = f"Weight must be a non-negative decimal integer, got {value!r}"
        raise ValueError(msg)
    if weight < 0:
        msg = f"Weight must be non-negative, got {value!r}"
        raise ValueError(msg)
    return weight


def sum_weights(weights: Iterable[str | int]) -> int:
    """Sum decimal string weights without leaving integer arithmetic.

    Example:
        >>> sum_weights(["0", "10", "20"])
        30
    """
    return sum((parse_weight(weight) for weight in weights), 0)


def sum_balance_details(details: Mapping[str, int]) -> int:
    """Total of an asset's per-bucket balances.

    Example:
        >>> sum_balance_details({"Free": 5, "ReservedStaking": 0})
        5
    """
    return sum(details.values(), 0)


def to_balance(value: int, *, label: str = "balance") -> int:
    """Check that an accumulated amount still fits the legacy Balance type.

    Args:
        value: Accumulated amount
        label: Name used in the error message

    Returns:
        int: The unchanged amount

    Raises:
        IntegrityError: If the amount is negative or exceeds u64

    Example:
        >>> to_balance(21_000_000 * 10**8)
        2100000000000000
    """
    if not 0 <= value <= MAX_BALANCE:
        msg = f"{label} {value} does not fit in the u64 Balance type"
        raise IntegrityError(msg)
    return value


__all__ = ["parse_weight", "sum_balance_details", "sum_weights", "to_balance"]
