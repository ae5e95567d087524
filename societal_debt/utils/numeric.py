"""Numeric helpers shared by the scoring and aggregation code"""

import math
from typing import Iterable, Optional


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]"""
    return max(lower, min(value, upper))


def is_finite(value: Optional[float]) -> bool:
    """True for real numbers that are neither NaN nor infinite"""
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def exact_sum(values: Iterable[float]) -> float:
    """Order-independent float sum (no accumulated rounding drift)"""
    return math.fsum(values)


def safe_percentage(part: float, whole: float) -> float:
    """part / whole as a percentage, 0 when whole is not positive"""
    return (part / whole) * 100 if whole > 0 else 0.0
