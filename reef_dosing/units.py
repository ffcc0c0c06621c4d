"""Volume unit conversion helpers."""

from __future__ import annotations

VOLUME_TO_LITERS = {
    "L": 1.0,
    "mL": 0.001,
    "gal": 3.78541,
    "fl_oz": 0.0295735,
}

_ALIASES = {
    "l": "L",
    "liter": "L",
    "liters": "L",
    "litre": "L",
    "litres": "L",
    "ml": "mL",
    "gal": "gal",
    "gallon": "gal",
    "gallons": "gal",
    "us_gal": "gal",
    "fl_oz": "fl_oz",
    "floz": "fl_oz",
}


def normalize_unit(unit: str) -> str:
    """Return the canonical spelling of a volume ``unit``."""
    if unit in VOLUME_TO_LITERS:
        return unit
    key = str(unit).strip().lower().replace(" ", "_").replace(".", "")
    if key in _ALIASES:
        return _ALIASES[key]
    raise ValueError(f"Unsupported unit: {unit}")


def to_liters(value: float, unit: str = "L") -> float:
    """Return ``value`` converted to liters."""
    return value * VOLUME_TO_LITERS[normalize_unit(unit)]

