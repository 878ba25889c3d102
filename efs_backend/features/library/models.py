"""
Library item records.

`LightItem` carries only what filtering needs; `Item` is the fully resolved
record. Neither is mutated after construction.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from efs_backend.shared import FileKind, format_timestamp


@dataclass(frozen=True)
class LightItem:
    id: str
    name: str
    extension: str
    tags: tuple[str, ...] = ()
    folders: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


@dataclass(frozen=True)
class Item:
    id: str
    name: str
    extension: str
    type: FileKind
    size: int
    created_at: datetime
    modified_at: datetime
    tags: tuple[str, ...] = ()
    folders: tuple[str, ...] = ()
    width: Optional[int] = None
    height: Optional[int] = None
    payload_location: Optional[Path] = field(default=None, compare=False, repr=False)
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def serialize_item(item: Item) -> dict[str, Any]:
    """Public JSON shape of an item. The payload location is never included."""
    return {
        "id": item.id,
        "name": item.name,
        "type": item.type,
        "size": item.size,
        "created": format_timestamp(item.created_at),
        "modified": format_timestamp(item.modified_at),
        "tags": list(item.tags),
        "folders": list(item.folders),
        "ext": item.extension,
        "width": item.width,
        "height": item.height,
    }
