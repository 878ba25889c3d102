"""Shared utilities for Eagle File Server."""
from .errors import is_debug_mode, sanitize_error_message
from .log import get_logger, log_structured, log_success, request_id_var
from .result import Result
from .time import Clock, format_timestamp, from_epoch, parse_timestamp, timer, utc_now
from .types import (
    DEFAULT_MIME_TYPE,
    ERROR_STATUS,
    EXTENSIONS,
    VISUAL_KINDS,
    ErrorCode,
    FileKind,
    classify_extension,
    extension_of,
    mime_type_for,
    normalize_extension,
)
from .version import get_version

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "sanitize_error_message",
    "is_debug_mode",
    "Clock",
    "utc_now",
    "from_epoch",
    "parse_timestamp",
    "format_timestamp",
    "timer",
    "FileKind",
    "ErrorCode",
    "ERROR_STATUS",
    "EXTENSIONS",
    "VISUAL_KINDS",
    "DEFAULT_MIME_TYPE",
    "classify_extension",
    "extension_of",
    "mime_type_for",
    "normalize_extension",
    "get_version",
]
