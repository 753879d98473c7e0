"""Numeric helpers shared by the scoring modules."""

from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float | int:
    """Round with .5 going up, unlike the builtin banker's rounding.

    Returns an int when ndigits is 0.
    """
    if ndigits == 0:
        return int(math.floor(value + 0.5))
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def mean(values: list[float]) -> float:
    """Arithmetic mean; 0 for an empty list."""
    return sum(values) / len(values) if values else 0
