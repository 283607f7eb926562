"""Monetary amount helpers.

Amounts travel through the domain as ``Decimal`` with two fractional digits
and are persisted as integer minor units so that SQL aggregation is exact.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")

# Largest amount accepted from callers; its minor units fit SQLite INTEGER
MAX_AMOUNT = Decimal("999999999999.99")
MAX_MINOR = 2**63 - 1


def to_decimal(value: Any) -> Decimal:
    """Coerce a numeric value to a two-place Decimal.

    Raises:
        ValueError: value is not a finite number or too large to quantize
    """
    if value is None:
        return Decimal("0.00")
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(value)
        if not amount.is_finite():
            raise ValueError(f"not a finite amount: {value}")
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"invalid amount: {value}") from e


def to_minor(value: Decimal | float | int | str) -> int:
    """Convert an amount to integer minor units (e.g. kuruş, cents)."""
    minor = int(to_decimal(value) * 100)
    if abs(minor) > MAX_MINOR:
        raise ValueError(f"amount out of storable range: {value}")
    return minor


def from_minor(value: int | None) -> Decimal:
    """Convert integer minor units back to a two-place Decimal."""
    return (Decimal(value or 0) / 100).quantize(CENT)
