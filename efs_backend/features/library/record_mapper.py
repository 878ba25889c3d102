"""
Map raw library records onto `LightItem` / `Item`.

Both sources speak the same record dialect: the directory convention's
``metadata.json`` and the catalog API's item records share most keys, and
the catalog adds a few aliases (``fileName``, ``dateCreated``, ``filePath``).
"""
from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from efs_backend.shared import (
    Clock,
    classify_extension,
    extension_of,
    normalize_extension,
    parse_timestamp,
)

from .dimension_resolver import resolve_dimensions
from .models import Item, LightItem

_NAME_KEYS = ("name", "fileName", "title")
_SIZE_KEYS = ("size", "fileSize")
_CREATED_KEYS = ("btime", "dateCreated", "created")
_MODIFIED_KEYS = ("modificationTime", "dateModified", "modified", "mtime", "lastModified")
_PATH_KEYS = ("filePath", "path", "file")


def _first_present(record: dict[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def _str_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    out: list[str] = []
    for v in value:
        if v is None or isinstance(v, (dict, list)):
            continue
        text = str(v).strip()
        if text:
            out.append(text)
    return tuple(out)


def record_name(record: dict[str, Any], fallback: str = "") -> str:
    value = _first_present(record, _NAME_KEYS)
    return str(value) if value is not None else fallback


def record_extension(record: dict[str, Any], name: str) -> str:
    explicit = normalize_extension(record.get("ext"))
    return explicit or extension_of(name)


def record_size(record: dict[str, Any]) -> int:
    value = _first_present(record, _SIZE_KEYS)
    try:
        size = int(value)
    except (TypeError, ValueError):
        return 0
    return max(0, size)


def record_created(record: dict[str, Any]) -> datetime | None:
    for key in _CREATED_KEYS:
        parsed = parse_timestamp(record.get(key))
        if parsed is not None:
            return parsed
    return None


def record_modified(record: dict[str, Any]) -> datetime | None:
    for key in _MODIFIED_KEYS:
        parsed = parse_timestamp(record.get(key))
        if parsed is not None:
            return parsed
    return None


def record_payload_path(record: dict[str, Any]) -> Path | None:
    value = _first_present(record, _PATH_KEYS)
    if not isinstance(value, str):
        return None
    return Path(value)


def is_deleted(record: dict[str, Any]) -> bool:
    return record.get("isDeleted") is True


def to_light_item(item_id: str, record: dict[str, Any]) -> LightItem:
    name = record_name(record, fallback=item_id)
    return LightItem(
        id=item_id,
        name=name,
        extension=record_extension(record, name),
        tags=_str_tuple(record.get("tags")),
        folders=_str_tuple(record.get("folders")),
        metadata=record,
    )


def build_item(
    light: LightItem,
    *,
    payload: Path | None,
    stat: os.stat_result | None,
    clock: Clock,
) -> Item:
    """
    Merge stored metadata with filesystem facts.

    Library timestamps win over the payload's stat; the clock is the last
    resort. A live stat size wins over the stored size.
    """
    record = light.metadata
    created = record_created(record)
    modified = record_modified(record)
    if stat is not None:
        if created is None:
            created = parse_timestamp(stat.st_ctime)
        if modified is None:
            modified = parse_timestamp(stat.st_mtime)
    now = None
    if created is None or modified is None:
        now = clock()
    kind = classify_extension(light.extension)
    width, height = resolve_dimensions(record, kind=kind, payload=payload)
    return Item(
        id=light.id,
        name=light.name,
        extension=light.extension,
        type=kind,
        size=int(stat.st_size) if stat is not None else record_size(record),
        created_at=created or now,
        modified_at=modified or now,
        tags=light.tags,
        folders=light.folders,
        width=width,
        height=height,
        payload_location=payload,
        metadata=record,
    )
