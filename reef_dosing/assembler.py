"""Combine gate, potency, trend and corrector into a dosing plan."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from .config import DosingConfig
from .constants import Parameter, default_tolerance, parameter_unit
from .corrector import correct, split_correction
from .gate import GateState, evaluate, format_follow_up
from .models import DoseFigures, DosingSnapshot, FollowUpQuestion, Recommendation
from .potency import TankRate, tank_rate
from .trend import estimate_slope, window_readings

_LOGGER = logging.getLogger(__name__)

__all__ = ["DosingPlan", "assemble", "recommend_parameter"]


@dataclass(slots=True, frozen=True)
class DosingPlan:
    """Either follow-up questions (blocked) or per-parameter recommendations."""

    state: GateState
    questions: tuple[FollowUpQuestion, ...] = ()
    recommendations: tuple[Recommendation, ...] = ()

    @property
    def ready(self) -> bool:
        return self.state is GateState.READY

    @property
    def follow_up(self) -> str:
        return format_follow_up(self.questions)

    def get(self, parameter: Parameter | str) -> Recommendation | None:
        param = Parameter.normalize(parameter)
        for rec in self.recommendations:
            if rec.parameter == param:
                return rec
        return None

    def as_dict(self) -> Dict[str, Any]:
        if not self.ready:
            return {
                "state": self.state.value,
                "follow_up": self.follow_up,
                "questions": [q.as_dict() for q in self.questions],
            }
        return {
            "state": self.state.value,
            "recommendations": [r.as_dict() for r in self.recommendations],
        }


def _tolerance(snapshot: DosingSnapshot, config: DosingConfig, parameter: Parameter) -> float:
    band = snapshot.tolerances.get(parameter)
    if band is None:
        band = config.tolerances.get(parameter)
    if band is None:
        band = default_tolerance(parameter)
    return band


def recommend_parameter(
    snapshot: DosingSnapshot,
    parameter: Parameter,
    *,
    now: datetime,
    config: DosingConfig,
) -> Recommendation | None:
    """Return the recommendation for one parameter or ``None`` to skip it.

    A parameter is skipped when it has no target, no preferred product with
    a usable rate, or no reading inside the window to use as current value.
    """

    target = snapshot.target_for(parameter)
    if target is None:
        return None

    product = snapshot.product_for(parameter)
    if product is None:
        _LOGGER.debug("Skipping %s: no preferred product", parameter.value)
        return None

    liters = snapshot.tank.liters if snapshot.tank else None
    rate = tank_rate(product.potency, liters)
    if not isinstance(rate, TankRate):
        _LOGGER.debug("Skipping %s: %s", parameter.value, rate.reason)
        return None

    window = window_readings(snapshot.readings, now, config.window_days, parameter)
    if not window:
        _LOGGER.debug("Skipping %s: no readings in the last %s days", parameter.value, config.window_days)
        return None

    current = window[-1].value
    trend = estimate_slope(window)
    tolerance = _tolerance(snapshot, config, parameter)
    existing = snapshot.current_dose(parameter)

    result = correct(
        parameter,
        current,
        target,
        tolerance,
        rate.units_per_ml,
        existing,
        trend.slope_per_day if trend.available else None,
    )

    figures = DoseFigures(
        current_value=current,
        target_value=target,
        tolerance=tolerance,
        tank_liters=rate.tank_liters,
        units_per_ml_per_l=rate.units_per_ml_per_l,
        tank_rate=rate.units_per_ml,
        slope_per_day=trend.slope_per_day,
        sample_count=trend.sample_count,
        existing_daily_ml=existing,
        drift_compensation_ml=result.drift_compensation_ml,
        ramp_days=config.ramp_days,
        correction_per_day_ml=split_correction(result.onetime_ml, config.ramp_days),
        unit=parameter_unit(parameter),
        product=product.label,
    )
    return Recommendation(
        parameter=parameter,
        onetime_correction_ml=result.onetime_ml,
        new_daily_dose_ml=result.new_daily_ml,
        explanation=figures,
    )


def assemble(
    snapshot: DosingSnapshot,
    *,
    now: datetime,
    config: DosingConfig | None = None,
) -> DosingPlan:
    """Return the dosing plan for ``snapshot`` evaluated at ``now``.

    The gate runs first. A blocked gate returns its questions and nothing
    else is computed. ``now`` is supplied by the caller so identical inputs
    always produce identical plans.
    """

    cfg = config or DosingConfig()
    gate = evaluate(
        snapshot.tank,
        snapshot.current_doses,
        snapshot.products,
        cfg.sustaining_parameters,
    )
    if not gate.ready:
        return DosingPlan(GateState.BLOCKED, questions=gate.questions)

    recommendations = []
    for parameter in Parameter:
        rec = recommend_parameter(snapshot, parameter, now=now, config=cfg)
        if rec is not None:
            recommendations.append(rec)
    return DosingPlan(GateState.READY, recommendations=tuple(recommendations))
