"""Compute one-time corrections and sustaining daily doses.

All values are returned unrounded. Rounding happens in
:mod:`reef_dosing.presentation` only, so repeated recomputation never
compounds rounding error.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

from .constants import Parameter

__all__ = ["Correction", "correct", "drift_compensation", "split_correction"]


@dataclass(slots=True, frozen=True)
class Correction:
    """Result of :func:`correct`.

    ``onetime_ml`` is negative when the parameter must come down, which
    liquid dosing cannot do. ``new_daily_ml`` is ``None`` when the caller had
    no existing daily dose to adjust.
    """

    onetime_ml: float
    new_daily_ml: float | None
    drift_compensation_ml: float
    within_tolerance: bool

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def drift_compensation(
    delta: float, tolerance: float, tank_rate: float, slope_per_day: float | None
) -> float:
    """Return ml/day that offsets one day of drift away from target.

    Drift counts as "away" when the level sits below the band and falls,
    sits above the band and rises, or sits inside the band and moves at
    all. Drift toward the target returns ``0.0``.
    """

    if not slope_per_day:
        return 0.0
    if delta > tolerance:
        away = slope_per_day < 0
    elif delta < -tolerance:
        away = slope_per_day > 0
    else:
        away = True
    if not away:
        return 0.0
    return -slope_per_day / tank_rate


def correct(
    parameter: Parameter,
    current: float,
    target: float,
    tolerance: float,
    tank_rate: float,
    existing_daily_ml: float | None,
    slope_per_day: float | None = None,
) -> Correction:
    """Return the corrective and sustaining dose for ``parameter``.

    ``tank_rate`` is units per ml for the tank (see
    :func:`reef_dosing.potency.tank_rate`). ``slope_per_day`` is ``None`` or
    ``0`` when no usable trend exists, in which case the daily dose is left
    unchanged.
    """

    if tank_rate <= 0:
        raise ValueError(f"tank_rate for {Parameter.normalize(parameter).value} must be positive")
    if tolerance < 0:
        raise ValueError("tolerance must be >= 0")

    delta = target - current
    within = abs(delta) <= tolerance
    onetime = 0.0 if within else delta / tank_rate

    if existing_daily_ml is None:
        return Correction(onetime, None, 0.0, within)

    compensation = drift_compensation(delta, tolerance, tank_rate, slope_per_day)
    return Correction(onetime, existing_daily_ml + compensation, compensation, within)


def split_correction(onetime_ml: float, ramp_days: int) -> float:
    """Return the per-day share of ``onetime_ml`` spread over ``ramp_days``."""

    if ramp_days <= 1:
        return onetime_ml
    return onetime_ml / ramp_days
