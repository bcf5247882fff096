"""Numeric coercion utilities"""

import math
from typing import Any, Optional


def is_number(value: Any) -> bool:
    """True for finite int/float values (bool excluded)"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:  # int beyond float range, e.g. a 400-digit literal
        return False


def to_number(value: Any) -> Optional[float]:
    """
    Coerce model output to a finite number, or None.

    Accepts ints, floats and numeric strings such as "720" or " 12.5 ";
    repaired model JSON often quotes its numbers.
    """
    if is_number(value):
        return value
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (82.5 -> 83)"""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
