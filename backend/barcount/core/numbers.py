"""Safe numeric coercion.

Inventory entry is partial, in-progress data. Every figure that flows into a
financial calculation goes through ``to_number_or_default`` first so that a
missing or garbled field behaves as zero instead of raising or producing NaN.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any

EPSILON = 1e-9


def to_number_or_default(value: Any, fallback: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``fallback`` when it is not one.

    Accepts ints, floats, Decimals and numeric strings. ``None``, booleans,
    empty strings, NaN, infinities and integers too large for a float all
    yield ``fallback``. Never raises.
    """
    if value is None or isinstance(value, bool):
        return fallback

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (ValueError, OverflowError):
            return fallback
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return fallback
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError, OverflowError):
            return fallback
    else:
        return fallback

    if not math.isfinite(number):
        return fallback
    return number


def finite_or_zero(value: float) -> float:
    """Clamp NaN and +/-Infinity to 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return value


def is_zero(value: float, eps: float = EPSILON) -> bool:
    return abs(value) <= eps


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (0.5 -> 1, -0.5 -> 0)."""
    return int(math.floor(value + 0.5))
