"""Helpers for loading engine settings."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .constants import DEFAULT_WINDOW_DAYS, Parameter
from .utils import deep_update, load_data, to_float

_LOGGER = logging.getLogger(__name__)

CONFIG_ENV = "REEF_DOSING_CONFIG"

DEFAULTS: dict[str, Any] = {
    "window_days": DEFAULT_WINDOW_DAYS,
    "rounding_increment_ml": 0.1,
    "sustaining_parameters": ["alk", "ca", "mg"],
    "ramp_days": 3,
    "water_change_fraction": 0.2,
    "tolerances": {},
}


@dataclass(slots=True, frozen=True)
class DosingConfig:
    """Validated engine settings."""

    window_days: float = DEFAULT_WINDOW_DAYS
    rounding_increment_ml: float = 0.1
    sustaining_parameters: tuple[Parameter, ...] = (Parameter.ALK, Parameter.CA, Parameter.MG)
    ramp_days: int = 3
    water_change_fraction: float = 0.2
    tolerances: Mapping[Parameter, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DosingConfig":
        """Return a config built from ``data`` merged over :data:`DEFAULTS`.

        Invalid values raise :class:`ValueError` naming the offending key.
        """

        merged = deep_update(
            {k: (dict(v) if isinstance(v, dict) else v) for k, v in DEFAULTS.items()},
            data,
        )

        def _positive(key: str) -> float:
            value = to_float(merged.get(key))
            if value is None or value <= 0:
                raise ValueError(f"{key}: must be a positive number")
            return value

        ramp = to_float(merged.get("ramp_days"))
        if ramp is None or ramp < 0 or ramp != int(ramp):
            raise ValueError("ramp_days: must be a non-negative integer")

        fraction = to_float(merged.get("water_change_fraction"))
        if fraction is None or not 0 < fraction <= 1:
            raise ValueError("water_change_fraction: must be between 0 and 1")

        tolerances: dict[Parameter, float] = {}
        for key, value in (merged.get("tolerances") or {}).items():
            band = to_float(value)
            if band is None or band < 0:
                raise ValueError(f"tolerances.{key}: must be >= 0")
            tolerances[Parameter.normalize(key)] = band

        return cls(
            window_days=_positive("window_days"),
            rounding_increment_ml=_positive("rounding_increment_ml"),
            sustaining_parameters=tuple(
                Parameter.normalize(p) for p in merged.get("sustaining_parameters") or ()
            ),
            ramp_days=int(ramp),
            water_change_fraction=fraction,
            tolerances=tolerances,
        )

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["sustaining_parameters"] = [p.value for p in self.sustaining_parameters]
        data["tolerances"] = {p.value: v for p, v in self.tolerances.items()}
        return data


def load_config(path: str | Path | None = None) -> DosingConfig:
    """Return settings from ``path`` (or ``REEF_DOSING_CONFIG``) over defaults.

    A missing or unreadable file falls back to the defaults with a warning.
    A file that parses but holds invalid values raises :class:`ValueError`.
    """

    source = path or os.getenv(CONFIG_ENV)
    if not source:
        return DosingConfig.from_dict({})
    try:
        data = load_data(source)
    except FileNotFoundError:
        _LOGGER.warning("Config file %s not found; using defaults", source)
        return DosingConfig.from_dict({})
    except ValueError as err:
        _LOGGER.warning("Unable to read config %s: %s; using defaults", source, err)
        return DosingConfig.from_dict({})
    if not isinstance(data, Mapping):
        _LOGGER.warning("Config %s is not a mapping; using defaults", source)
        return DosingConfig.from_dict({})
    return DosingConfig.from_dict(data)
