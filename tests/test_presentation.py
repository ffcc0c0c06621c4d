import pytest

from reef_dosing.constants import Parameter
from reef_dosing.models import DoseFigures, Recommendation
from reef_dosing.presentation import ACTION_DOSE, ACTION_HOLD, ACTION_REDUCE, present, round_ml


def _rec(parameter=Parameter.ALK, onetime=1.0, daily=10.0, current=7.0, target=8.0):
    figures = DoseFigures(
        current_value=current,
        target_value=target,
        tolerance=0.2,
        tank_liters=70,
        units_per_ml_per_l=15 / 1050,
        tank_rate=1.0,
        slope_per_day=0.0,
        sample_count=1,
        existing_daily_ml=daily,
        drift_compensation_ml=0.0,
        ramp_days=3,
        correction_per_day_ml=onetime / 3,
        unit="dKH",
    )
    return Recommendation(parameter, onetime, daily, figures)


@pytest.mark.parametrize(
    "value, increment, expected",
    [
        (1.25, 0.1, 1.3),
        (1.24, 0.1, 1.2),
        (2.0000000001, 0.1, 2.0),
        (7.3, 0.5, 7.5),
        (-0.04, 0.1, 0.0),
        (None, 0.1, None),
    ],
)
def test_round_ml(value, increment, expected):
    assert round_ml(value, increment) == expected


def test_round_ml_rejects_bad_increment():
    with pytest.raises(ValueError):
        round_ml(1.0, 0)


def test_present_dose():
    shown = present(_rec(onetime=1.4000000000000004, daily=10.2))
    assert shown["action"] == ACTION_DOSE
    assert shown["onetime_correction_ml"] == 1.4
    assert shown["correction_per_day_ml"] == 0.5
    assert shown["new_daily_dose_ml"] == 10.2
    assert shown["daily_clamped"] is False
    assert "reduction" not in shown


def test_present_hold_when_rounded_to_zero():
    shown = present(_rec(onetime=0.01))
    assert shown["action"] == ACTION_HOLD


def test_present_reduce_suggests_water_change():
    shown = present(_rec(onetime=-4.5, current=12.0, target=10.0), water_change_fraction=0.2)
    assert shown["action"] == ACTION_REDUCE
    assert shown["onetime_correction_ml"] == 0.0
    reduction = shown["reduction"]
    assert reduction["saltmix"] == 7.5
    assert reduction["water_change_fraction"] == pytest.approx(2.0 / 4.5)
    assert reduction["staged_changes"] == 3
    assert any("above target" in note for note in shown["notes"])


def test_present_clamps_negative_daily():
    shown = present(_rec(onetime=0.0, daily=-1.3))
    assert shown["new_daily_dose_ml"] == 0.0
    assert shown["daily_clamped"] is True
    assert shown["notes"]


def test_present_without_daily_baseline():
    shown = present(_rec(daily=None))
    assert shown["new_daily_dose_ml"] is None


def test_present_uses_display_name_in_reduce_note():
    shown = present(_rec(onetime=-4.5, current=12.0, target=10.0))
    assert shown["name"] == "Alkalinity"
    assert "Alkalinity is above target; reduce with water changes instead of dosing." in shown["notes"]
