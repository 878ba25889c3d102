"""Backend-facing alias for shared utilities."""

from __future__ import annotations

from efs_shared import *  # noqa: F401,F403
from efs_shared import __all__  # noqa: F401
