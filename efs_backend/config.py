"""
Configuration for Eagle File Server.

Values come from environment variables (``EFS_*``) once at startup; the
resulting ``ServerConfig`` is frozen and shared read-only by all requests.
"""
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from .utils import parse_bool

logger = logging.getLogger(__name__)

SOURCE_FILESYSTEM = "filesystem"
SOURCE_CATALOG = "catalog"
VALID_SOURCES = (SOURCE_FILESYSTEM, SOURCE_CATALOG)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_CATALOG_URL = "http://localhost:41595"
DEFAULT_CATALOG_PAGE_SIZE = 1000
DEFAULT_STREAM_CHUNK_SIZE = 64 * 1024


def _env_raw(env: Mapping[str, str], *names: str, default: str | None = None) -> str | None:
    for name in names:
        val = env.get(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(
    env: Mapping[str, str],
    default: int,
    *names: str,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    raw = _env_raw(env, *names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0], raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0], value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0], value, max_value)
        value = max_value
    return value


def _env_float(env: Mapping[str, str], *names: str) -> float | None:
    raw = _env_raw(env, *names)
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid float for %s=%r, ignoring", names[0], raw)
        return None
    return value if value > 0 else None


def _env_bool(env: Mapping[str, str], default: bool, *names: str) -> bool:
    raw = _env_raw(env, *names)
    if raw is None:
        return default
    return parse_bool(raw, default)


def _resolve_library_path(raw: str | None) -> Path | None:
    if not raw:
        return None
    try:
        return Path(raw).expanduser().resolve()
    except (OSError, RuntimeError):
        logger.warning("Failed to resolve EFS_LIBRARY_PATH: %s", raw)
        return None


def _resolve_source(raw: str | None) -> str:
    value = (raw or SOURCE_FILESYSTEM).strip().lower()
    if value not in VALID_SOURCES:
        logger.warning("Unknown EFS_SOURCE=%r, using %s", raw, SOURCE_FILESYSTEM)
        return SOURCE_FILESYSTEM
    return value


@dataclass(frozen=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    enable_cors: bool = True
    library_path: Path | None = None
    source: str = SOURCE_FILESYSTEM
    catalog_url: str = DEFAULT_CATALOG_URL
    catalog_page_size: int = DEFAULT_CATALOG_PAGE_SIZE
    catalog_timeout: float | None = None
    stream_chunk_size: int = DEFAULT_STREAM_CHUNK_SIZE

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        """Copy with every non-None override applied (CLI flags over env)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "library_path" in changes:
            changes["library_path"] = _resolve_library_path(str(changes["library_path"]))
        if "source" in changes:
            changes["source"] = _resolve_source(changes["source"])
        return replace(self, **changes)


def load_config(env: Mapping[str, str] | None = None) -> ServerConfig:
    """Build the server configuration from environment variables."""
    env = os.environ if env is None else env
    return ServerConfig(
        host=_env_raw(env, "EFS_HOST", default=DEFAULT_HOST) or DEFAULT_HOST,
        port=_env_int(env, DEFAULT_PORT, "EFS_PORT", min_value=0, max_value=65535),
        enable_cors=_env_bool(env, True, "EFS_ENABLE_CORS"),
        library_path=_resolve_library_path(_env_raw(env, "EFS_LIBRARY_PATH", "EAGLE_LIBRARY_PATH")),
        source=_resolve_source(_env_raw(env, "EFS_SOURCE")),
        catalog_url=(_env_raw(env, "EFS_CATALOG_URL", default=DEFAULT_CATALOG_URL) or DEFAULT_CATALOG_URL).rstrip("/"),
        catalog_page_size=_env_int(env, DEFAULT_CATALOG_PAGE_SIZE, "EFS_CATALOG_PAGE_SIZE", min_value=1, max_value=100000),
        catalog_timeout=_env_float(env, "EFS_CATALOG_TIMEOUT"),
        stream_chunk_size=_env_int(
            env, DEFAULT_STREAM_CHUNK_SIZE, "EFS_STREAM_CHUNK_SIZE", min_value=1024, max_value=16 * 1024 * 1024
        ),
    )
