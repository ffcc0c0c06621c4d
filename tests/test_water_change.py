import math

import pytest

from reef_dosing.water_change import fraction_for_target, staged_changes, water_change_result


def test_water_change_result():
    assert water_change_result(12.0, 8.0, 0.25) == pytest.approx(11.0)
    assert water_change_result(12.0, 8.0, 1.5) == 8.0
    assert water_change_result(12.0, 8.0, -1) == 12.0
    assert water_change_result(12.0, math.nan, 0.2) == 12.0


def test_fraction_for_target():
    assert fraction_for_target(12.0, 10.0, 8.0) == pytest.approx(0.5)
    assert fraction_for_target(10.0, 10.0, 8.0) == 0.0
    # saltmix is above the current level: a water change cannot lower it
    assert fraction_for_target(12.0, 10.0, 14.0) is None
    assert fraction_for_target(12.0, 10.0, 12.0) is None


def test_staged_changes():
    # 12 -> 10 with 7.5 saltmix at 20% per change: 10.38 after two, 9.80 after three
    assert staged_changes(12.0, 10.0, 7.5, 0.2) == 3
    assert staged_changes(12.0, 12.0, 7.5, 0.2) == 0
    assert staged_changes(12.0, 7.5, 7.5, 0.2) is None
    assert staged_changes(12.0, 10.0, 7.5, 1.0) == 1
