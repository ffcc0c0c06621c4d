#!/usr/bin/env python3
"""Compute a dosing plan from a JSON or YAML snapshot file."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
from scripts import ensure_repo_root_on_path

ROOT = ensure_repo_root_on_path()

import voluptuous as vol

from reef_dosing.assembler import assemble
from reef_dosing.config import load_config
from reef_dosing.explain import build_explanation
from reef_dosing.presentation import present_all
from reef_dosing.snapshot import SnapshotError, build_snapshot, parse_datetime
from reef_dosing.utils import load_data

# argparse already uses 2 for usage errors
EXIT_BLOCKED = 3


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Recommend daily dosing volumes from a tank snapshot"
    )
    parser.add_argument("snapshot", type=Path, help="JSON or YAML snapshot file")
    parser.add_argument(
        "--now",
        help="ISO timestamp used to window readings (defaults to current UTC time)",
    )
    parser.add_argument("--config", type=Path, help="Optional engine config file")
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Output unrounded figures and the derivation instead of display values",
    )
    parser.add_argument("--output", type=Path, help="Optional path to write the JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        snapshot = build_snapshot(load_data(args.snapshot))
        now = parse_datetime(args.now) if args.now else datetime.now(UTC)
    except (FileNotFoundError, SnapshotError, vol.Invalid) as err:
        parser.error(str(err))
    except ValueError as err:
        parser.error(f"Unable to read {args.snapshot}: {err}")

    try:
        config = load_config(args.config)
    except ValueError as err:
        parser.error(f"Invalid config: {err}")
    plan = assemble(snapshot, now=now, config=config)

    if not plan.ready:
        result = plan.as_dict()
    elif args.raw:
        result = {**plan.as_dict(), "explanation": build_explanation(snapshot, plan)}
    else:
        result = {
            "state": plan.state.value,
            "recommendations": present_all(
                plan.recommendations,
                increment=config.rounding_increment_ml,
                water_change_fraction=config.water_change_fraction,
            ),
        }

    text = json.dumps(result, indent=2)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text)
    else:
        print(text)
    return 0 if plan.ready else EXIT_BLOCKED


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
