from __future__ import annotations

import re
from importlib import metadata
from pathlib import Path

_DISTRIBUTION = "eagle-file-server"


def _find_pyproject_version() -> str:
    root = Path(__file__).resolve().parent.parent
    pyproject_path = root / "pyproject.toml"
    if not pyproject_path.exists():
        return "0.0.0"
    try:
        raw = pyproject_path.read_text(encoding="utf-8")
    except OSError:
        return "0.0.0"
    match = re.search(r'^version\s*=\s*"(.*?)"', raw, flags=re.MULTILINE)
    if match:
        return match.group(1).strip()
    return "0.0.0"


def get_version() -> str:
    """Installed distribution version, falling back to the checkout's pyproject."""
    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return _find_pyproject_version()
