"""Decimal arithmetic helpers"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Any, Iterable

TOLERANCE = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a numeric value to Decimal without float artefacts.

    Args:
        value: int, float, str or Decimal

    Returns:
        Decimal value
    """
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_decimal(value: Decimal, decimal_places: int = 2) -> Decimal:
    """
    Round a decimal value to specified decimal places.

    Args:
        value: Decimal value to round
        decimal_places: Number of decimal places (default 2)

    Returns:
        Rounded decimal value
    """
    quantize_value = Decimal(10) ** -decimal_places
    return value.quantize(quantize_value, rounding=ROUND_HALF_UP)


def floor_decimal(value: Decimal, decimal_places: int = 2) -> Decimal:
    """Truncate a non-negative decimal value to whole cents"""
    quantize_value = Decimal(10) ** -decimal_places
    return value.quantize(quantize_value, rounding=ROUND_DOWN)


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """
    Sum a list of decimal values.

    Args:
        values: List of decimal values

    Returns:
        Sum of all values
    """
    return sum(values, ZERO)


def amounts_differ(a: Decimal, b: Decimal) -> bool:
    """True when two amounts differ by more than the 0.01 tolerance"""
    return abs(a - b) > TOLERANCE


def is_settled(value: Decimal) -> bool:
    """Balances below one cent are treated as zero"""
    return abs(value) < TOLERANCE
