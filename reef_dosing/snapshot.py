"""Validate raw row payloads and turn them into a :class:`DosingSnapshot`.

The accepted shape follows the rows a storage layer typically returns::

    {
        "tank": {"id": "t1", "volume_liters": 300},
        "targets": {"alk": 8.3, "ca": 430, "mg": null},
        "tolerances": {"alk": 0.1},
        "readings": [{"parameter": "alk", "value": 8.1, "measured_at": "2024-05-01T08:00:00Z"}],
        "preferred_products": [
            {"parameter": "alk", "product": {"id": "p1", "brand": "Acme", "name": "Alk+",
             "dose_ref_ml": 30, "delta_ref_value": 15, "volume_ref_liters": 35}}
        ],
        "current_doses": {"alk": 12.5, "ca": 10, "mg": 2},
    }

Unknown keys are ignored. ``null`` target or dose columns mean "not set".
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any, Mapping

import voluptuous as vol

from .constants import Parameter
from .models import DosingSnapshot, Potency, Product, Reading, Tank
from .units import normalize_unit

__all__ = ["SnapshotError", "SNAPSHOT_SCHEMA", "build_snapshot", "parse_datetime"]


class SnapshotError(ValueError):
    """Raised when an input payload does not match the expected shape."""


def parse_datetime(value: Any) -> datetime:
    """Return ``value`` as an aware datetime; naive values are taken as UTC."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as err:
            raise vol.Invalid(f"invalid timestamp {value!r}") from err
    else:
        raise vol.Invalid(f"expected a timestamp, got {type(value).__name__}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parameter(value: Any) -> Parameter:
    try:
        return Parameter.normalize(value)
    except (TypeError, ValueError) as err:
        raise vol.Invalid(str(err)) from err


def _unit(value: Any) -> str:
    try:
        return normalize_unit(value)
    except ValueError as err:
        raise vol.Invalid(str(err)) from err


def _finite(value: float) -> float:
    if not math.isfinite(value):
        raise vol.Invalid("expected a finite number")
    return value


def _parameter_map(value_schema: Any):
    """Return a validator for ``{parameter: value}`` mappings."""

    inner = vol.Schema({vol.All(str, _parameter): value_schema})

    def _validate(value: Any) -> dict[Parameter, Any]:
        if value is None:
            return {}
        return inner(value)

    return _validate


FINITE = vol.All(vol.Coerce(float), _finite)
OPTIONAL_FLOAT = vol.Any(None, FINITE)
NON_NEGATIVE = vol.Any(None, vol.All(FINITE, vol.Range(min=0)))

TANK_SCHEMA = vol.Schema(
    {
        vol.Optional("id"): vol.Any(None, vol.Coerce(str)),
        vol.Optional("volume_liters"): OPTIONAL_FLOAT,
        vol.Optional("volume_value"): OPTIONAL_FLOAT,
        vol.Optional("volume_unit"): vol.Any(None, _unit),
    },
    extra=vol.REMOVE_EXTRA,
)

READING_SCHEMA = vol.Schema(
    {
        vol.Required("parameter"): _parameter,
        vol.Required("value"): FINITE,
        vol.Required("measured_at"): parse_datetime,
    },
    extra=vol.REMOVE_EXTRA,
)

PRODUCT_SCHEMA = vol.Schema(
    {
        vol.Optional("id"): vol.Any(None, vol.Coerce(str)),
        vol.Optional("brand"): vol.Any(None, str),
        vol.Optional("name"): vol.Any(None, str),
        vol.Optional("dose_ref_ml"): OPTIONAL_FLOAT,
        vol.Optional("delta_ref_value"): OPTIONAL_FLOAT,
        vol.Optional("volume_ref_liters"): OPTIONAL_FLOAT,
    },
    extra=vol.REMOVE_EXTRA,
)

PREFERRED_SCHEMA = vol.Schema(
    {
        vol.Required("parameter"): _parameter,
        vol.Optional("product", default=dict): vol.Any(None, PRODUCT_SCHEMA),
    },
    extra=vol.REMOVE_EXTRA,
)

SNAPSHOT_SCHEMA = vol.Schema(
    {
        vol.Optional("tank"): vol.Any(None, TANK_SCHEMA),
        vol.Optional("targets", default=dict): _parameter_map(OPTIONAL_FLOAT),
        vol.Optional("tolerances", default=dict): _parameter_map(NON_NEGATIVE),
        vol.Optional("readings", default=list): [READING_SCHEMA],
        vol.Optional("preferred_products", default=list): [PREFERRED_SCHEMA],
        vol.Optional("current_doses", default=dict): _parameter_map(NON_NEGATIVE),
    },
    extra=vol.REMOVE_EXTRA,
)


def build_snapshot(payload: Mapping[str, Any]) -> DosingSnapshot:
    """Return a validated snapshot for ``payload``.

    Raises :class:`SnapshotError` describing the first invalid field.
    """

    if not isinstance(payload, Mapping):
        raise SnapshotError("Invalid dosing snapshot: expected a mapping")
    try:
        data = SNAPSHOT_SCHEMA(dict(payload))
    except vol.Invalid as err:
        raise SnapshotError(f"Invalid dosing snapshot: {err}") from err

    tank_data = data.get("tank")
    tank = Tank(**tank_data) if tank_data else None

    products = []
    for row in data["preferred_products"]:
        info = row.get("product") or {}
        products.append(
            Product(
                parameter=row["parameter"],
                potency=Potency(
                    dose_ref_ml=info.get("dose_ref_ml"),
                    delta_ref_value=info.get("delta_ref_value"),
                    volume_ref_liters=info.get("volume_ref_liters"),
                ),
                id=info.get("id"),
                brand=info.get("brand"),
                name=info.get("name"),
            )
        )

    readings = [
        Reading(parameter=r["parameter"], value=r["value"], measured_at=r["measured_at"])
        for r in data["readings"]
    ]

    return DosingSnapshot.create(
        tank=tank,
        targets=data["targets"],
        tolerances=data["tolerances"],
        readings=readings,
        products=products,
        current_doses=data["current_doses"],
    )
