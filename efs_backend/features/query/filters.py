"""
Request-scoped query filter.

Blank strings are treated as absent; numeric paging parameters that are not
valid non-negative integers silently fall back to their defaults.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from efs_backend.shared import normalize_extension
from efs_backend.utils import split_csv

DEFAULT_LIMIT = 100
DEFAULT_OFFSET = 0


@dataclass(frozen=True)
class QueryFilter:
    keyword: str | None = None
    extensions: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    folders: tuple[str, ...] = ()
    order_by: str | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = DEFAULT_OFFSET


def parse_non_negative_int(raw: Any, default: int) -> int:
    """
    Parse a non-negative integer query parameter.

    `None`, blanks, non-integers ("abc", "1.5") and negatives return `default`.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw if raw >= 0 else default
    text = str(raw).strip()
    if not text or not text.isdecimal():
        return default
    try:
        return int(text)
    except ValueError:
        return default


def _clean_text(raw: Any) -> str | None:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def _normalize_extensions(raw: Any) -> tuple[str, ...]:
    out: list[str] = []
    for part in split_csv(raw):
        ext = normalize_extension(part)
        if ext and ext not in out:
            out.append(ext)
    return tuple(out)


def parse_query_filter(params: Mapping[str, Any]) -> QueryFilter:
    """
    Build a filter from query parameters.

    Recognized keys: keyword, ext (comma-separated, ORed), tags and folders
    (comma-separated), orderBy, limit, offset.
    """
    return QueryFilter(
        keyword=_clean_text(params.get("keyword")),
        extensions=_normalize_extensions(params.get("ext")),
        tags=tuple(split_csv(params.get("tags"))),
        folders=tuple(split_csv(params.get("folders"))),
        order_by=_clean_text(params.get("orderBy")),
        limit=parse_non_negative_int(params.get("limit"), DEFAULT_LIMIT),
        offset=parse_non_negative_int(params.get("offset"), DEFAULT_OFFSET),
    )
