"""
Time utilities for timestamps and performance measurement.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime (the default clock)."""
    return datetime.now(timezone.utc)


def from_epoch(value: Any) -> datetime | None:
    """
    Convert an epoch timestamp to an aware UTC datetime.

    Values above 1e11 are treated as milliseconds (the library stores
    `btime`/`mtime` in ms); smaller values as seconds. Non-numeric, negative
    or out-of-range values return None.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number <= 0:
        return None
    if number > 1e11:
        number /= 1000.0
    try:
        return datetime.fromtimestamp(number, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an epoch number or an ISO-8601 string into an aware datetime."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return from_epoch(text)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return from_epoch(value)


def format_timestamp(ts: datetime) -> str:
    """
    Format a datetime as an ISO 8601 UTC string with millisecond precision.

    Returns e.g. "2025-12-29T19:30:45.123Z".
    """
    utc = ts.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


@contextmanager
def timer(label: str, logger: logging.Logger) -> Iterator[None]:
    """
    Context manager for timing operations.

    Usage:
        with timer("library scan", logger):
            await source.scan_lightweight()
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("%s took %.3fs", label, elapsed)
