"""Fixed-point decimal helpers.

Every monetary and ratio value produced by the analytics core is a
``Decimal`` quantized to ``SCALE`` fractional digits with half-up
rounding.  Divisions by zero degrade to zero instead of raising.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

SCALE = 4
ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a number to ``Decimal`` (floats go through ``str``)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def quantize(value: Decimal | int | float, scale: int = SCALE) -> Decimal:
    """Round *value* half-up to *scale* fractional digits."""
    exponent = Decimal(1).scaleb(-scale)
    return to_decimal(value).quantize(exponent, rounding=ROUNDING)


def safe_div(
    numerator: Decimal | int,
    denominator: Decimal | int,
    scale: int = SCALE,
) -> Decimal:
    """``numerator / denominator`` quantized, or zero for a zero denominator."""
    den = to_decimal(denominator)
    if den == 0:
        return quantize(ZERO, scale)
    return quantize(to_decimal(numerator) / den, scale)


def percentage(part: Decimal | int, whole: Decimal | int, scale: int = SCALE) -> Decimal:
    """``part / whole * 100``; zero when *whole* is zero."""
    den = to_decimal(whole)
    if den == 0:
        return quantize(ZERO, scale)
    return quantize(to_decimal(part) * HUNDRED / den, scale)


def mean(values: Iterable[Decimal]) -> Decimal:
    items = list(values)
    if not items:
        return quantize(ZERO)
    return safe_div(sum(items, ZERO), len(items))


def sqrt(value: Decimal) -> Decimal:
    """Square root quantized to ``SCALE``; zero for non-positive input."""
    if value <= 0:
        return quantize(ZERO)
    return quantize(value.sqrt())


def sample_std(values: Iterable[Decimal]) -> Decimal:
    """Sample standard deviation (n - 1).  Zero with fewer than two values."""
    items = list(values)
    if len(items) < 2:
        return quantize(ZERO)
    avg = sum(items, ZERO) / len(items)
    variance = sum(((v - avg) ** 2 for v in items), ZERO) / (len(items) - 1)
    return sqrt(variance)


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(high, value))
