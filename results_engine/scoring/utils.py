"""
Decimal Utilities
results_engine/scoring/utils.py

Provides precision-safe decimal math for results computation. Every rounding
is ROUND_HALF_UP so the same inputs always yield byte-identical outputs.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence, Union

Number = Union[int, float, str, Decimal]

TWO_PLACES = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without binary float artefacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: Number) -> Decimal:
    """Round half-up to 2 decimal places (3.845 -> 3.85, never banker's 3.84)."""
    return to_decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def round_int(value: Number) -> int:
    """Round half-up to the nearest integer."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def mean(values: Sequence[Decimal]) -> Decimal:
    """
    Arithmetic mean, unrounded.

    Raises ValueError on an empty sequence; callers decide what "no data" means.
    """
    if not values:
        raise ValueError("mean() of an empty sequence")
    return sum(values, Decimal("0")) / Decimal(len(values))


def sample_std_dev(values: Sequence[Decimal]) -> Decimal:
    """
    Sample standard deviation (n - 1 denominator).

    Formula: sqrt(Σ(value_i - mean)² / (n - 1))
    Returns Decimal("0") for fewer than two values.
    """
    if len(values) < 2:
        return Decimal("0")
    avg = mean(values)
    variance = sum(((v - avg) ** 2 for v in values), Decimal("0")) / Decimal(len(values) - 1)
    return variance.sqrt()


def percent(part: Number, whole: Number) -> int:
    """Integer percentage of part/whole, half-up; 0 when whole is 0."""
    whole_d = to_decimal(whole)
    if whole_d == 0:
        return 0
    return round_int(to_decimal(part) / whole_d * 100)
