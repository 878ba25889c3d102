"""
Core utilities for route handlers.
"""
from .response import (
    _internal_error_response,
    _json_response,
    _raw_json_response,
    _sanitize_json_payload,
    status_for,
)
from .services import APP_KEY_SERVICES, _require_services
from .streaming import CACHE_CONTROL, safe_disposition_filename, stream_payload

__all__ = [
    "APP_KEY_SERVICES",
    "CACHE_CONTROL",
    "_internal_error_response",
    "_json_response",
    "_raw_json_response",
    "_require_services",
    "_sanitize_json_payload",
    "safe_disposition_filename",
    "status_for",
    "stream_payload",
]
