"""Water change helpers used for reduction guidance."""

from __future__ import annotations

import math

__all__ = ["water_change_result", "fraction_for_target", "staged_changes"]


def water_change_result(current: float, saltmix: float, fraction: float) -> float:
    """Return the level after replacing ``fraction`` of the water.

    ``new = current * (1 - f) + saltmix * f`` with ``f`` clamped to
    ``0.0`` - ``1.0``. Non-finite inputs return ``current`` unchanged.
    """

    if not all(math.isfinite(v) for v in (current, saltmix, fraction)):
        return current
    f = max(0.0, min(1.0, fraction))
    return current * (1 - f) + saltmix * f


def fraction_for_target(current: float, target: float, saltmix: float) -> float | None:
    """Return the water change fraction that moves ``current`` to ``target``.

    ``None`` is returned when fresh saltmix cannot reach the target, i.e. the
    target does not lie between ``current`` and ``saltmix``.
    """

    if not all(math.isfinite(v) for v in (current, target, saltmix)):
        return None
    if current == target:
        return 0.0
    if current == saltmix:
        return None
    fraction = (current - target) / (current - saltmix)
    if fraction < 0 or fraction > 1:
        return None
    return fraction


def staged_changes(current: float, target: float, saltmix: float, fraction: float) -> int | None:
    """Return how many changes of ``fraction`` bring ``current`` to ``target``.

    Each change leaves ``(1 - fraction)`` of the gap to saltmix, so after
    ``k`` changes the level is ``saltmix + (current - saltmix) * (1 - f) ** k``.
    """

    needed = fraction_for_target(current, target, saltmix)
    if needed is None:
        return None
    if needed == 0:
        return 0
    if not 0 < fraction < 1:
        return 1 if fraction >= 1 else None
    if needed >= 1:
        return None
    remaining = (target - saltmix) / (current - saltmix)
    return max(1, math.ceil(math.log(remaining) / math.log(1 - fraction) - 1e-9))
