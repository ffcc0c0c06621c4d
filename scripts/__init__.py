"""Helper utilities for command line scripts."""

import sys
from pathlib import Path


def ensure_repo_root_on_path() -> Path:
    """Add the repository root to ``sys.path`` so ``reef_dosing`` imports."""
    root = Path(__file__).resolve().parents[1]
    path = str(root)
    if path not in sys.path:
        sys.path.insert(1, path)
    return root
