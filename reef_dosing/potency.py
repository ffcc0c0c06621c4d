"""Convert product reference tests into tank specific dosing rates.

A potency record states that ``dose_ref_ml`` ml changed a parameter by
``delta_ref_value`` units in ``volume_ref_liters`` liters of water. The
converter turns that into units per ml for the user's tank. The outcome is
either a :class:`TankRate` or an :class:`Unusable` carrying the reason, so
callers branch on ``result.usable`` instead of checking for sentinels.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

from .models import Potency
from .utils import to_float

__all__ = [
    "TankRate",
    "Unusable",
    "RateResult",
    "is_usable",
    "potency_per_ml_per_l",
    "tank_rate",
    "dose_ml_for_delta",
]


@dataclass(slots=True, frozen=True)
class TankRate:
    """Units the parameter moves per ml dosed into the tank."""

    units_per_ml: float
    units_per_ml_per_l: float
    tank_liters: float
    usable: Literal[True] = True


@dataclass(slots=True, frozen=True)
class Unusable:
    """Potency or tank data that cannot drive automatic corrections."""

    reason: str
    usable: Literal[False] = False


RateResult = TankRate | Unusable

_FIELDS = ("dose_ref_ml", "delta_ref_value", "volume_ref_liters")


def _invalid_field(potency: Potency | None) -> str | None:
    if potency is None:
        return "potency missing"
    values = []
    for name in _FIELDS:
        value = to_float(getattr(potency, name))
        if value is None:
            return f"{name} missing"
        if value <= 0:
            return f"{name} must be positive"
        values.append(value)
    dose, delta, volume = values
    per_l = delta / dose / volume
    if not math.isfinite(per_l) or per_l <= 0:
        return "potency out of range"
    return None


def is_usable(potency: Potency | None) -> bool:
    """Return ``True`` when the potency fields give a finite, positive rate."""
    return _invalid_field(potency) is None


def potency_per_ml_per_l(potency: Potency | None) -> float | None:
    """Return units per ml per liter or ``None`` when unusable."""

    if _invalid_field(potency) is not None:
        return None
    return potency.delta_ref_value / potency.dose_ref_ml / potency.volume_ref_liters


def tank_rate(potency: Potency | None, tank_volume_liters: float | None) -> RateResult:
    """Return the tank specific rate for ``potency``.

    ``units_per_ml = delta_ref_value / (dose_ref_ml * volume_ref_liters) *
    tank_volume_liters``. Any non-positive potency field or tank volume
    yields :class:`Unusable`, never ``0``, ``inf`` or ``nan``.
    """

    reason = _invalid_field(potency)
    if reason is not None:
        return Unusable(reason)
    volume = to_float(tank_volume_liters)
    if volume is None:
        return Unusable("tank volume missing")
    if volume <= 0:
        return Unusable("tank volume must be positive")

    per_l = potency_per_ml_per_l(potency)
    rate = per_l * volume
    if not math.isfinite(rate) or rate <= 0:
        return Unusable("rate out of range")
    return TankRate(units_per_ml=rate, units_per_ml_per_l=per_l, tank_liters=volume)


def dose_ml_for_delta(delta_units: float, rate: TankRate) -> float:
    """Return ml needed to change the parameter by ``delta_units``."""
    return delta_units / rate.units_per_ml
