"""Estimate parameter consumption from recent readings."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Sequence

from .constants import DEFAULT_WINDOW_DAYS, DEGENERATE_DENOMINATOR, SECONDS_PER_DAY, Parameter
from .models import Reading

_LOGGER = logging.getLogger(__name__)

__all__ = ["TrendEstimate", "estimate_slope", "window_readings", "latest_reading"]


@dataclass(slots=True, frozen=True)
class TrendEstimate:
    """Least squares slope in units per day.

    ``slope_per_day`` is ``0.0`` when fewer than two readings were supplied
    or all readings share one timestamp (``degenerate``).
    """

    slope_per_day: float
    sample_count: int
    degenerate: bool = False

    @property
    def available(self) -> bool:
        return self.sample_count >= 2 and not self.degenerate

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _sorted(readings: Iterable[Reading]) -> list[Reading]:
    # sorted() is stable so equal timestamps keep insertion order
    return sorted(readings, key=lambda r: r.measured_at)


def estimate_slope(readings: Sequence[Reading]) -> TrendEstimate:
    """Return the ordinary least squares slope of value against elapsed days.

    Readings are sorted by ``measured_at`` before fitting and x values are
    days since the earliest reading. No weighting or outlier rejection is
    applied.
    """

    n = len(readings)
    if n < 2:
        return TrendEstimate(0.0, n)

    rows = _sorted(readings)
    t0 = rows[0].measured_at
    xs = [(r.measured_at - t0).total_seconds() / SECONDS_PER_DAY for r in rows]
    ys = [float(r.value) for r in rows]

    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_xx = sum(x * x for x in xs)
    denom = n * sum_xx - sum_x * sum_x
    if abs(denom) < DEGENERATE_DENOMINATOR:
        _LOGGER.debug("Degenerate trend fit over %d readings sharing one timestamp", n)
        return TrendEstimate(0.0, n, degenerate=True)

    slope = (n * sum_xy - sum_x * sum_y) / denom
    return TrendEstimate(slope, n)


def window_readings(
    readings: Iterable[Reading],
    now: datetime,
    days: float = DEFAULT_WINDOW_DAYS,
    parameter: Parameter | None = None,
) -> list[Reading]:
    """Return readings measured within ``days`` before ``now``, oldest first.

    Readings dated after ``now`` are excluded. ``parameter`` optionally
    restricts the result to one parameter.
    """

    if days <= 0:
        raise ValueError("days must be positive")
    since = now - timedelta(days=days)
    selected = (
        r
        for r in readings
        if since <= r.measured_at <= now and (parameter is None or r.parameter == parameter)
    )
    return _sorted(selected)


def latest_reading(readings: Iterable[Reading]) -> Reading | None:
    """Return the most recent reading; ties go to the last inserted."""

    rows = _sorted(readings)
    return rows[-1] if rows else None
