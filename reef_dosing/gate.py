"""Decide whether enough facts are known to compute recommendations.

The gate is a two state machine. ``READY`` lets the assembler compute.
``BLOCKED`` carries the follow-up questions for every missing fact. All
checks run and accumulate. None of them short-circuits another, and the
check order fixes the order the questions are presented in:

1. tank volume,
2. current ml/day for each sustaining parameter,
3. usable potency for each preferred product.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Sequence

from .constants import Parameter, sustaining_parameters
from .models import FollowUpQuestion, Product, QuestionKind, Tank
from .potency import is_usable
from .utils import to_float

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "GateState",
    "GateResult",
    "check_readiness",
    "evaluate",
    "format_follow_up",
    "TANK_VOLUME_QUESTION",
]

TANK_VOLUME_QUESTION = "What is your tank volume in liters?"
FOLLOW_UP_HEADER = "I need a bit more info:"


class GateState(str, Enum):
    BLOCKED = "blocked"
    READY = "ready"


@dataclass(slots=True, frozen=True)
class GateResult:
    state: GateState
    questions: tuple[FollowUpQuestion, ...] = ()

    @property
    def ready(self) -> bool:
        return self.state is GateState.READY


def _current_dose_question(parameter: Parameter) -> FollowUpQuestion:
    return FollowUpQuestion(
        kind=QuestionKind.CURRENT_DOSE,
        text=f"How many ml/day are you currently dosing for {parameter.label}?",
        parameter=parameter,
    )


def _potency_question(product: Product) -> FollowUpQuestion:
    return FollowUpQuestion(
        kind=QuestionKind.POTENCY,
        text=(
            f"For {product.label} ({product.parameter.label}), provide potency like: "
            '"X ml raises Y units in Z liters".'
        ),
        parameter=product.parameter,
        product_id=product.id,
    )


def check_readiness(
    tank: Tank | None,
    current_doses: Mapping[Parameter, float],
    products: Iterable[Product],
    sustaining: Sequence[Parameter] | None = None,
) -> list[FollowUpQuestion]:
    """Return follow-up questions for missing facts (empty when ready).

    ``sustaining`` defaults to the parameters flagged in the parameter
    dataset (alk, ca and mg).
    """

    questions: list[FollowUpQuestion] = []

    if tank is None or tank.liters is None:
        questions.append(FollowUpQuestion(kind=QuestionKind.TANK_VOLUME, text=TANK_VOLUME_QUESTION))

    required = sustaining_parameters() if sustaining is None else sustaining
    for parameter in required:
        param = Parameter.normalize(parameter)
        dose = to_float(current_doses.get(param))
        if dose is None or dose < 0:
            questions.append(_current_dose_question(param))

    for product in products:
        if not is_usable(product.potency):
            questions.append(_potency_question(product))

    return questions


def evaluate(
    tank: Tank | None,
    current_doses: Mapping[Parameter, float],
    products: Iterable[Product],
    sustaining: Sequence[Parameter] | None = None,
) -> GateResult:
    """Return the gate outcome for the supplied facts."""

    questions = check_readiness(tank, current_doses, products, sustaining)
    if questions:
        _LOGGER.info("Dosing blocked pending %d follow-up question(s)", len(questions))
        return GateResult(GateState.BLOCKED, tuple(questions))
    return GateResult(GateState.READY)


def format_follow_up(questions: Sequence[FollowUpQuestion | str]) -> str:
    """Return the questions as one bulleted message."""

    if not questions:
        return ""
    return FOLLOW_UP_HEADER + "\n" + "\n".join(f"• {q}" for q in questions)
