"""Immutable records consumed and produced by the dosing engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping

from .constants import Parameter
from .units import to_liters
from .utils import to_float

__all__ = [
    "Tank",
    "Reading",
    "Potency",
    "Product",
    "CurrentDose",
    "Target",
    "Tolerance",
    "DosingSnapshot",
    "DoseFigures",
    "Recommendation",
    "QuestionKind",
    "FollowUpQuestion",
]


@dataclass(slots=True, frozen=True)
class Tank:
    """Aquarium the recommendations are computed for.

    ``volume_liters`` takes precedence. When it is missing the volume is
    derived from ``volume_value`` expressed in ``volume_unit``.
    """

    id: str | None = None
    volume_liters: float | None = None
    volume_value: float | None = None
    volume_unit: str | None = None

    @property
    def liters(self) -> float | None:
        """Return the usable volume in liters or ``None`` if unknown/invalid."""
        liters = to_float(self.volume_liters)
        if liters is None:
            value = to_float(self.volume_value)
            if value is None:
                return None
            try:
                liters = to_liters(value, self.volume_unit or "L")
            except ValueError:
                return None
        return liters if liters > 0 else None


@dataclass(slots=True, frozen=True)
class Reading:
    """A single test result for one parameter."""

    parameter: Parameter
    value: float
    measured_at: datetime


@dataclass(slots=True, frozen=True)
class Potency:
    """Reference test: ``dose_ref_ml`` ml moved the parameter by
    ``delta_ref_value`` units in ``volume_ref_liters`` liters."""

    dose_ref_ml: float | None = None
    delta_ref_value: float | None = None
    volume_ref_liters: float | None = None

    def as_dict(self) -> Dict[str, float | None]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class Product:
    """Dosing product selected as preferred for a parameter."""

    parameter: Parameter
    potency: Potency = field(default_factory=Potency)
    id: str | None = None
    brand: str | None = None
    name: str | None = None

    @property
    def label(self) -> str:
        return f"{self.brand or 'your'} {self.name or 'product'}"


@dataclass(slots=True, frozen=True)
class CurrentDose:
    parameter: Parameter
    ml_per_day: float


@dataclass(slots=True, frozen=True)
class Target:
    parameter: Parameter
    desired_value: float


@dataclass(slots=True, frozen=True)
class Tolerance:
    parameter: Parameter
    band: float


@dataclass(slots=True, frozen=True)
class DosingSnapshot:
    """Everything one engine invocation needs, fetched up front by the caller."""

    tank: Tank | None = None
    targets: Mapping[Parameter, float] = field(default_factory=dict)
    tolerances: Mapping[Parameter, float] = field(default_factory=dict)
    readings: tuple[Reading, ...] = ()
    products: tuple[Product, ...] = ()
    current_doses: Mapping[Parameter, float] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        *,
        tank: Tank | None = None,
        targets: Mapping[Any, float] | list[Target] | None = None,
        tolerances: Mapping[Any, float] | list[Tolerance] | None = None,
        readings: list[Reading] | tuple[Reading, ...] = (),
        products: list[Product] | tuple[Product, ...] = (),
        current_doses: Mapping[Any, float] | list[CurrentDose] | None = None,
    ) -> "DosingSnapshot":
        """Return a snapshot with parameter keys normalized.

        Records and plain mappings are both accepted for targets, tolerances
        and current doses. ``None`` and non-finite values are dropped.
        """

        def _collect(items, attr: str) -> dict[Parameter, float]:
            result: dict[Parameter, float] = {}
            if not items:
                return result
            pairs = (
                items.items()
                if isinstance(items, Mapping)
                else ((item.parameter, getattr(item, attr)) for item in items)
            )
            for key, value in pairs:
                number = to_float(value)
                if number is not None:
                    result[Parameter.normalize(key)] = number
            return result

        return cls(
            tank=tank,
            targets=_collect(targets, "desired_value"),
            tolerances=_collect(tolerances, "band"),
            readings=tuple(readings),
            products=tuple(products),
            current_doses=_collect(current_doses, "ml_per_day"),
        )

    def target_for(self, parameter: Parameter) -> float | None:
        return self.targets.get(parameter)

    def product_for(self, parameter: Parameter) -> Product | None:
        for product in self.products:
            if product.parameter == parameter:
                return product
        return None

    def current_dose(self, parameter: Parameter) -> float | None:
        return self.current_doses.get(parameter)


@dataclass(slots=True, frozen=True)
class DoseFigures:
    """Inputs and intermediate values behind one recommendation."""

    current_value: float
    target_value: float
    tolerance: float
    tank_liters: float
    units_per_ml_per_l: float
    tank_rate: float
    slope_per_day: float
    sample_count: int
    existing_daily_ml: float | None
    drift_compensation_ml: float
    ramp_days: int
    correction_per_day_ml: float
    unit: str
    product: str | None = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class Recommendation:
    """Corrective and sustaining dose for one parameter.

    Values are unrounded. Negative results mean a reduction is needed.
    ``new_daily_dose_ml`` is ``None`` when no daily dose baseline exists.
    """

    parameter: Parameter
    onetime_correction_ml: float
    new_daily_dose_ml: float | None
    explanation: DoseFigures

    def as_dict(self) -> Dict[str, Any]:
        return {
            "parameter": self.parameter.value,
            "onetime_correction_ml": self.onetime_correction_ml,
            "new_daily_dose_ml": self.new_daily_dose_ml,
            "explanation": self.explanation.as_dict(),
        }


class QuestionKind(str, Enum):
    TANK_VOLUME = "tank_volume"
    CURRENT_DOSE = "current_dose"
    POTENCY = "potency"


@dataclass(slots=True, frozen=True)
class FollowUpQuestion:
    """Prompt for a missing fact that blocks computation."""

    kind: QuestionKind
    text: str
    parameter: Parameter | None = None
    product_id: str | None = None

    def __str__(self) -> str:
        return self.text

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "text": self.text,
            "parameter": self.parameter.value if self.parameter else None,
            "product_id": self.product_id,
        }
