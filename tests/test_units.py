import pytest

from reef_dosing.models import Tank
from reef_dosing.units import normalize_unit, to_liters


def test_normalize_unit_aliases():
    assert normalize_unit("gallons") == "gal"
    assert normalize_unit("Liters") == "L"
    assert normalize_unit("ml") == "mL"
    with pytest.raises(ValueError, match="Unsupported unit"):
        normalize_unit("barrels")


def test_conversions():
    assert to_liters(10, "gal") == pytest.approx(37.8541)


def test_tank_liters_resolution():
    assert Tank(volume_liters=300).liters == 300
    assert Tank(volume_value=50, volume_unit="gal").liters == pytest.approx(189.2705)
    assert Tank(volume_value=120).liters == 120
    assert Tank(volume_liters=0).liters is None
    assert Tank().liters is None


def test_tank_with_unknown_unit_has_no_volume():
    assert Tank(volume_value=10, volume_unit="cups").liters is None
