"""Percentage rounding, performance status and trend labels."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, -2.5 -> -2).

    Python's round() is banker's rounding; every percentage shown to the
    user goes through this instead.
    """
    return int(math.floor(value + 0.5))


def performance_status(rate: int) -> str:
    """Classify a 0-100 completion rate: excellent, good, fair, or poor."""
    if rate >= 80:
        return "excellent"
    if rate >= 60:
        return "good"
    if rate >= 40:
        return "fair"
    return "poor"


def trend(current: int, previous: int) -> str:
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "same"
