"""Build the "show the math" payload handed to presentation layers."""

from __future__ import annotations

from typing import Any, Dict

from .assembler import DosingPlan
from .models import DosingSnapshot, Recommendation
from .potency import potency_per_ml_per_l

__all__ = ["math_lines", "build_explanation"]


def _fmt(value: float | None, digits: int = 4) -> str:
    if value is None:
        return "?"
    return f"{value:.{digits}g}"


def math_lines(rec: Recommendation) -> list[str]:
    """Return short derivation lines for ``rec``."""

    fig = rec.explanation
    delta = fig.target_value - fig.current_value
    unit = fig.unit
    lines = [
        f"current = {_fmt(fig.current_value)} {unit}, target = {_fmt(fig.target_value)} {unit}, "
        f"tolerance = ±{_fmt(fig.tolerance)} {unit}",
        f"rate = {_fmt(fig.units_per_ml_per_l, 6)} {unit}/ml/L × {_fmt(fig.tank_liters)} L "
        f"= {_fmt(fig.tank_rate, 6)} {unit}/ml",
    ]
    if rec.onetime_correction_ml:
        lines.append(
            f"one-time = {_fmt(delta)} / {_fmt(fig.tank_rate, 6)} = {_fmt(rec.onetime_correction_ml)} ml"
        )
        if fig.ramp_days > 1:
            lines.append(
                f"spread over {fig.ramp_days} days = {_fmt(fig.correction_per_day_ml)} ml/day"
            )
    else:
        lines.append("one-time = 0 ml (within tolerance)")
    lines.append(
        f"trend = {_fmt(fig.slope_per_day)} {unit}/day from {fig.sample_count} reading(s)"
    )
    if rec.new_daily_dose_ml is None:
        lines.append("daily = unchanged (no current daily dose given)")
    else:
        lines.append(
            f"daily = {_fmt(fig.existing_daily_ml)} + {_fmt(fig.drift_compensation_ml)} "
            f"= {_fmt(rec.new_daily_dose_ml)} ml/day"
        )
    return lines


def build_explanation(snapshot: DosingSnapshot, plan: DosingPlan) -> Dict[str, Any]:
    """Return the inputs used and per-parameter derivations for ``plan``.

    The structure mirrors what a conversational or web front end needs to
    restate the calculation. Blocked plans only carry the follow-up text.
    """

    if not plan.ready:
        return {"follow_up": plan.follow_up, "questions": [str(q) for q in plan.questions]}

    tank_liters = snapshot.tank.liters if snapshot.tank else None
    products = []
    for product in snapshot.products:
        entry: Dict[str, Any] = {
            "parameter": product.parameter.value,
            "id": product.id,
            "brand": product.brand,
            "name": product.name,
            "units_per_ml_per_l": potency_per_ml_per_l(product.potency),
        }
        entry.update(product.potency.as_dict())
        products.append(entry)

    return {
        "used": {
            "tank_liters": tank_liters,
            "targets": {p.value: v for p, v in snapshot.targets.items()},
            "current_doses": {p.value: v for p, v in snapshot.current_doses.items()},
            "products": products,
        },
        "parameters": {
            rec.parameter.value: {
                "figures": rec.explanation.as_dict(),
                "math": math_lines(rec),
            }
            for rec in plan.recommendations
        },
    }
