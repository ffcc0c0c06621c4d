"""Shared helpers for data files and loose numeric input."""

from __future__ import annotations

import json
import math
import os
from functools import lru_cache
from os import PathLike
from pathlib import Path
from typing import Any, Dict, Mapping, Union

import yaml

__all__ = [
    "load_data",
    "load_dataset",
    "clear_dataset_cache",
    "get_data_dir",
    "overlay_dir",
    "normalize_key",
    "deep_update",
    "to_float",
]

PathType = Union[str, PathLike]

# Bundled catalogs live in ``reef_dosing/data``. ``REEF_DOSING_DATA_DIR``
# replaces that directory and ``REEF_DOSING_OVERLAY_DIR`` holds partial files
# merged on top, so a single tolerance can be changed without a full copy.
DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"
DATA_ENV = "REEF_DOSING_DATA_DIR"
OVERLAY_ENV = "REEF_DOSING_OVERLAY_DIR"

_YAML_SUFFIXES = {".yaml", ".yml"}


def load_data(path: PathType) -> Any:
    """Return the parsed JSON or YAML document at ``path``.

    Raises :class:`FileNotFoundError` for a missing file and
    :class:`ValueError` (naming the file) when it cannot be decoded.
    """

    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(p)
    text = p.read_text(encoding="utf-8")
    if p.suffix.lower() in _YAML_SUFFIXES:
        try:
            return yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {p}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {p}: {exc}") from exc


def deep_update(base: Dict[str, Any], other: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``other`` into ``base`` recursively and return ``base``."""

    for key, value in other.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_update(current, value)
        else:
            base[key] = value
    return base


def get_data_dir() -> Path:
    """Return the catalog directory, honoring ``REEF_DOSING_DATA_DIR``."""

    env = os.getenv(DATA_ENV)
    return Path(env).expanduser() if env else DEFAULT_DATA_DIR


def overlay_dir() -> Path | None:
    """Return the overlay directory from ``REEF_DOSING_OVERLAY_DIR`` if set."""

    env = os.getenv(OVERLAY_ENV)
    return Path(env).expanduser() if env else None


def load_dataset(filename: str) -> Dict[str, Any]:
    """Return catalog ``filename`` with any overlay file merged on top.

    A catalog missing from both directories yields ``{}``. Results are cached
    per directory pair, so changing either environment variable takes effect
    on the next call.
    """

    return _load_dataset(filename, get_data_dir(), overlay_dir())


@lru_cache(maxsize=None)
def _load_dataset(filename: str, base: Path, overlay: Path | None) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for folder in (base, overlay):
        if folder is None or not (folder / filename).is_file():
            continue
        layer = load_data(folder / filename)
        if not isinstance(layer, Mapping):
            raise ValueError(f"{folder / filename} must contain a mapping")
        deep_update(data, layer)
    return data


def clear_dataset_cache() -> None:
    """Forget cached catalogs so edited files are read again."""

    _load_dataset.cache_clear()


def normalize_key(key: str) -> str:
    """Return ``key`` lower-cased with spaces, hyphens and underscores unified."""

    value = str(key).casefold().replace("-", " ").replace("_", " ")
    return "_".join(value.split())


def to_float(value: object) -> float | None:
    """Return ``value`` as a finite float or ``None``."""

    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number
