"""
Numeric guards shared by the metric engines.

Every number an engine emits passes through ``finite_or_none``; percentage
deltas go through ``safe_percentage_change``, which refuses zero and null
denominators.  Together they guarantee no ``NaN`` or ``Infinity`` ever
reaches a response.
"""

from __future__ import annotations

import math
from typing import Iterable

Number = float | int


def finite_or_none(value: Number | None) -> Number | None:
    """Return ``value`` unchanged when finite, else ``None``."""
    if value is None:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def safe_difference(current: Number | None, previous: Number | None) -> Number | None:
    """``current - previous``, or ``None`` if either side is missing."""
    if current is None or previous is None:
        return None
    return finite_or_none(current - previous)


def safe_percentage_change(current: Number | None, previous: Number | None) -> float | None:
    """
    Percent change from ``previous`` to ``current``, relative to ``|previous|``.

    ``None`` when either value is missing or ``previous`` is exactly zero.
    """
    if current is None or previous is None or previous == 0:
        return None
    return finite_or_none((current - previous) / abs(previous) * 100)


def mean_of_non_null(values: Iterable[Number | None]) -> float | None:
    """Arithmetic mean of the non-null, finite samples; ``None`` if there are none."""
    samples = [
        float(v) for v in values
        if v is not None and math.isfinite(v)
    ]
    if not samples:
        return None
    return finite_or_none(math.fsum(samples) / len(samples))


def window_weeks(months: int, weeks_per_month: float) -> int:
    """Number of weekly records covering ``months`` months (half rounds up)."""
    return int(math.floor(months * weeks_per_month + 0.5))
