"""
Response utilities for route handlers.
"""
from __future__ import annotations

import math
from typing import Any

from aiohttp import web

from efs_backend.shared import ERROR_STATUS, ErrorCode, Result, get_logger, sanitize_error_message

logger = get_logger(__name__)


def status_for(result: Result[Any]) -> int:
    if result.ok:
        return 200
    return ERROR_STATUS.get(str(result.code), 500)


def _json_response(result: Result[Any], status: int | None = None) -> web.Response:
    """
    Convert a Result to the `{success, data | error}` envelope.

    Args:
        result: Result object
        status: HTTP status code (optional, derived from the error code if None)

    Returns:
        aiohttp web.Response
    """
    if status is None:
        status = status_for(result)

    if result.ok:
        payload: dict[str, Any] = {"success": True, "data": result.data}
    else:
        payload = {"success": False, "error": result.error or "Internal server error", "code": result.code}
        for key, value in (result.meta or {}).items():
            payload.setdefault(key, value)

    return web.json_response(_sanitize_json_payload(payload), status=status)


def _raw_json_response(payload: dict[str, Any], status: int = 200) -> web.Response:
    return web.json_response(_sanitize_json_payload(payload), status=status)


def _internal_error_response(exc: BaseException, context: str) -> web.Response:
    """Log an unexpected handler failure and answer 500 without leaking paths."""
    logger.error("Error in %s: %s", context, exc, exc_info=True)
    return _json_response(
        Result.Err(
            ErrorCode.INTERNAL_ERROR,
            "Internal server error",
            details=sanitize_error_message(exc, "Unexpected failure"),
        ),
        status=500,
    )


def _sanitize_json_payload(value: Any) -> Any:
    """
    Normalize payload values so they are always valid strict JSON.
    - Converts NaN/Infinity floats to None.
    - Recurses through dict/list/tuple containers.
    """
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {k: _sanitize_json_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize_json_payload(v) for v in value]
    return value
