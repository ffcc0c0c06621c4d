"""Presentation boundary: rounding and action labels for recommendations.

The engine math never rounds. Everything shown to a user passes through
:func:`round_ml` here exactly once.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable

from .constants import display_name, saltmix_level
from .models import Recommendation
from .water_change import fraction_for_target, staged_changes

__all__ = ["round_ml", "present", "present_all", "ACTION_DOSE", "ACTION_REDUCE", "ACTION_HOLD"]

ACTION_DOSE = "dose"
ACTION_REDUCE = "reduce"
ACTION_HOLD = "hold"


def round_ml(value: float | None, increment: float = 0.1) -> float | None:
    """Return ``value`` rounded half-up to the nearest ``increment``."""

    if value is None:
        return None
    if increment <= 0:
        raise ValueError("increment must be positive")
    step = Decimal(str(increment))
    steps = (Decimal(str(value)) / step).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    result = float(steps * step)
    return 0.0 if result == 0 else result


def _reduction(rec: Recommendation, fraction: float) -> Dict[str, Any]:
    fig = rec.explanation
    saltmix = saltmix_level(rec.parameter)
    if saltmix is None:
        return {"water_change_fraction": None, "staged_changes": None, "saltmix": None}
    needed = fraction_for_target(fig.current_value, fig.target_value, saltmix)
    return {
        "water_change_fraction": needed,
        "staged_changes": staged_changes(fig.current_value, fig.target_value, saltmix, fraction),
        "stage_fraction": fraction,
        "saltmix": saltmix,
    }


def present(
    rec: Recommendation,
    *,
    increment: float = 0.1,
    water_change_fraction: float = 0.2,
) -> Dict[str, Any]:
    """Return a display ready mapping for ``rec``.

    ``action`` is ``"reduce"`` when the one-time result is negative (liquid
    dosing cannot subtract, so a partial water change plan is attached),
    ``"dose"`` when positive and ``"hold"`` when zero after rounding.
    A negative daily dose is clamped to ``0`` and flagged.
    """

    onetime = round_ml(rec.onetime_correction_ml, increment)
    daily = round_ml(rec.new_daily_dose_ml, increment)
    notes: list[str] = []

    if onetime is not None and onetime < 0:
        action = ACTION_REDUCE
    elif onetime:
        action = ACTION_DOSE
    else:
        action = ACTION_HOLD

    daily_clamped = False
    if daily is not None and daily < 0:
        daily = 0.0
        daily_clamped = True
        notes.append("Daily dose would be negative; stop dosing and retest.")

    fig = rec.explanation
    result: Dict[str, Any] = {
        "parameter": rec.parameter.value,
        "name": display_name(rec.parameter),
        "unit": fig.unit,
        "action": action,
        "onetime_correction_ml": 0.0 if action == ACTION_REDUCE else onetime,
        "correction_per_day_ml": (
            0.0 if action == ACTION_REDUCE else round_ml(fig.correction_per_day_ml, increment)
        ),
        "ramp_days": fig.ramp_days,
        "new_daily_dose_ml": daily,
        "daily_clamped": daily_clamped,
        "notes": notes,
    }
    if action == ACTION_REDUCE:
        result["reduction"] = _reduction(rec, water_change_fraction)
        notes.append(
            f"{result['name']} is above target; reduce with water changes instead of dosing."
        )
    return result


def present_all(
    recs: Iterable[Recommendation], *, increment: float = 0.1, water_change_fraction: float = 0.2
) -> list[Dict[str, Any]]:
    return [
        present(r, increment=increment, water_change_fraction=water_change_fraction)
        for r in recs
    ]
