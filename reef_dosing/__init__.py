"""Dosing recommendation engine for reef aquarium water chemistry."""

from __future__ import annotations

from .assembler import DosingPlan, assemble
from .config import DosingConfig, load_config
from .constants import Parameter
from .corrector import Correction, correct
from .gate import GateResult, GateState, check_readiness, evaluate, format_follow_up
from .models import (
    CurrentDose,
    DosingSnapshot,
    FollowUpQuestion,
    Potency,
    Product,
    Reading,
    Recommendation,
    Tank,
    Target,
    Tolerance,
)
from .potency import TankRate, Unusable, tank_rate
from .snapshot import SnapshotError, build_snapshot
from .trend import TrendEstimate, estimate_slope, window_readings

__all__ = [
    "Parameter",
    "Tank",
    "Reading",
    "Potency",
    "Product",
    "CurrentDose",
    "Target",
    "Tolerance",
    "DosingSnapshot",
    "Recommendation",
    "FollowUpQuestion",
    "TankRate",
    "Unusable",
    "tank_rate",
    "TrendEstimate",
    "estimate_slope",
    "window_readings",
    "Correction",
    "correct",
    "GateState",
    "GateResult",
    "check_readiness",
    "evaluate",
    "format_follow_up",
    "DosingPlan",
    "assemble",
    "DosingConfig",
    "load_config",
    "SnapshotError",
    "build_snapshot",
]
