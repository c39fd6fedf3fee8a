"""Locating and reading project spec folders."""

import re
from pathlib import Path
from typing import Optional

from ..file_walker import read_optional

SPECS_DIR = ".agent-os/specs"

_DATED_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")


def spec_dirs(root: Path) -> list[Path]:
    base = root / SPECS_DIR
    if not base.is_dir():
        return []
    return sorted(p for p in base.iterdir() if p.is_dir())


def find_spec_path(root: Path) -> Optional[Path]:
    """Latest spec folder, preferring dated names (YYYY-MM-DD-topic)."""
    dirs = spec_dirs(root)
    dated = [d for d in dirs if _DATED_RE.match(d.name)]
    candidates = dated or dirs
    return candidates[-1] if candidates else None


def read_spec_dirs(root: Path, max_bytes: int) -> dict[str, dict[str, Optional[str]]]:
    return {
        d.name: {
            "spec.md": read_optional(d / "spec.md", max_bytes),
            "tasks.md": read_optional(d / "tasks.md", max_bytes),
        }
        for d in spec_dirs(root)
    }
