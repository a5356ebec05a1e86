"""Percentage helpers shared by every reader."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, Decimal]

_CENT = Decimal("0.01")


def round_percent(value: Number) -> float:
    """Round half-up to two decimals, so 59.995 becomes 60.0."""
    if isinstance(value, float):
        value = Decimal(repr(value))
    return float(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def percent_of(part: int, whole: int) -> Decimal:
    return Decimal(part) * 100 / Decimal(whole)


def clamp_percent(value: Decimal) -> Decimal:
    return min(max(value, Decimal(0)), Decimal(100))
