"""Central constants used across the dosing engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

from .utils import load_dataset, normalize_key, to_float

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "Parameter",
    "PARAMETER_FILE",
    "DEFAULT_WINDOW_DAYS",
    "DEGENERATE_DENOMINATOR",
    "SECONDS_PER_DAY",
    "DEFAULT_SUSTAINING",
    "parameter_unit",
    "display_name",
    "default_tolerance",
    "saltmix_level",
    "sustaining_parameters",
]


class Parameter(str, Enum):
    """Water parameters with an independent target and tolerance."""

    ALK = "alk"
    CA = "ca"
    MG = "mg"
    PO4 = "po4"
    NO3 = "no3"
    SALINITY = "salinity"

    @classmethod
    def normalize(cls, value: "str | Parameter") -> "Parameter":
        """Return enum member for ``value`` ignoring case and separators."""
        if isinstance(value, cls):
            return value
        key = normalize_key(value)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown parameter: {value}") from None

    @property
    def label(self) -> str:
        return self.value.upper()


PARAMETER_FILE = "parameters.yaml"

# Readings older than this many days are ignored by the trend estimator
DEFAULT_WINDOW_DAYS = 7
# Below this the least squares denominator is treated as zero
DEGENERATE_DENOMINATOR = 1e-9
SECONDS_PER_DAY = 24 * 60 * 60

_CANONICAL_UNITS: dict[Parameter, str] = {
    Parameter.ALK: "dKH",
    Parameter.CA: "ppm",
    Parameter.MG: "ppm",
    Parameter.PO4: "ppm",
    Parameter.NO3: "ppm",
    Parameter.SALINITY: "ppt",
}

DEFAULT_SUSTAINING: tuple[Parameter, ...] = (Parameter.ALK, Parameter.CA, Parameter.MG)


def _catalog() -> dict[Parameter, Mapping[str, object]]:
    """Return parameter catalog entries keyed by :class:`Parameter`.

    Entries with an unknown parameter name or a non-mapping body are skipped
    with a warning so a typo in an overlay cannot break the engine.
    """

    catalog: dict[Parameter, Mapping[str, object]] = {}
    for key, entry in load_dataset(PARAMETER_FILE).items():
        try:
            param = Parameter.normalize(key)
        except ValueError:
            _LOGGER.warning("Ignoring unknown parameter %r in %s", key, PARAMETER_FILE)
            continue
        if not isinstance(entry, Mapping):
            _LOGGER.warning("Ignoring malformed entry for %s in %s", key, PARAMETER_FILE)
            continue
        catalog[param] = entry
    return catalog


def _info(parameter: Parameter) -> Mapping[str, object]:
    return _catalog().get(parameter, {})


def parameter_unit(parameter: str | Parameter) -> str:
    """Return the canonical unit for ``parameter``."""

    param = Parameter.normalize(parameter)
    unit = _info(param).get("unit")
    return str(unit) if unit else _CANONICAL_UNITS[param]


def display_name(parameter: str | Parameter) -> str:
    """Return a human readable name for ``parameter``."""

    param = Parameter.normalize(parameter)
    name = _info(param).get("display_name")
    return str(name) if name else param.label


def default_tolerance(parameter: str | Parameter) -> float:
    """Return the dataset tolerance band for ``parameter`` (``0.0`` if unset)."""

    value = to_float(_info(Parameter.normalize(parameter)).get("tolerance"))
    if value is None or value < 0:
        return 0.0
    return value


def saltmix_level(parameter: str | Parameter) -> float | None:
    """Return the typical fresh saltmix level for ``parameter`` if known."""

    return to_float(_info(Parameter.normalize(parameter)).get("saltmix"))


def sustaining_parameters() -> tuple[Parameter, ...]:
    """Return parameters that need a current ml/day fact before dosing math."""

    flagged = tuple(p for p in Parameter if _info(p).get("sustaining") is True)
    return flagged or DEFAULT_SUSTAINING
