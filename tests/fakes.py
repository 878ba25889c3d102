"""In-memory item sources and on-disk library builders for tests."""
from __future__ import annotations

import json
import struct
import zlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from efs_backend.features.library import BaseItemSource, Item, LightItem
from efs_backend.shared import ErrorCode, Result, classify_extension

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def png_header(width: int, height: int) -> bytes:
    """A PNG with only IHDR and IEND: enough for Pillow to read the size."""

    def chunk(tag: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(tag + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", crc)

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def write_item(
    library: Path,
    item_id: str,
    metadata: dict[str, Any],
    payload: bytes | None = b"",
    *,
    payload_name: str | None = None,
) -> Path:
    """Create ``images/<id>.info`` with metadata.json and (optionally) a payload."""
    info_dir = library / "images" / f"{item_id}.info"
    info_dir.mkdir(parents=True, exist_ok=True)
    record = {"id": item_id, **metadata}
    (info_dir / "metadata.json").write_text(json.dumps(record), encoding="utf-8")
    if payload is not None:
        name = payload_name or f"{record.get('name', item_id)}.{record.get('ext', 'bin')}"
        (info_dir / name).write_bytes(payload)
    return info_dir


def light_of(item: Item) -> LightItem:
    return LightItem(
        id=item.id,
        name=item.name,
        extension=item.extension,
        tags=item.tags,
        folders=item.folders,
        metadata=item.metadata,
    )


def make_item(
    item_id: str,
    *,
    name: str | None = None,
    ext: str = ".png",
    size: int = 0,
    tags: tuple[str, ...] = (),
    folders: tuple[str, ...] = (),
    created: datetime = FIXED_NOW,
    modified: datetime = FIXED_NOW,
    metadata: dict[str, Any] | None = None,
    payload: Path | None = None,
) -> Item:
    return Item(
        id=item_id,
        name=name or item_id,
        extension=ext,
        type=classify_extension(ext),
        size=size,
        created_at=created,
        modified_at=modified,
        tags=tags,
        folders=folders,
        payload_location=payload,
        metadata=metadata or {},
    )


class FakeSource(BaseItemSource):
    """Serves a fixed list of items and counts every lookup."""

    kind = "fake"

    def __init__(self, items: list[Item], *, scan_error: str | None = None):
        self.items = {item.id: item for item in items}
        self.scan_error = scan_error
        self.vanished: set[str] = set()
        self.full_calls: list[str] = []
        self.light_calls: list[str] = []
        self.scan_calls = 0
        self.closed = False

    async def enumerate_ids(self) -> Result[list[str]]:
        if self.scan_error:
            return Result.Err(self.scan_error, "scan failed")
        return Result.Ok(list(self.items))

    async def get_lightweight(self, item_id: str) -> LightItem | None:
        self.light_calls.append(item_id)
        item = self.items.get(item_id)
        return light_of(item) if item is not None else None

    async def scan_lightweight(self) -> Result[list[LightItem]]:
        self.scan_calls += 1
        if self.scan_error:
            return Result.Err(self.scan_error, "scan failed")
        return Result.Ok([light_of(item) for item in self.items.values()])

    async def get_full(self, item_id: str) -> Result[Item]:
        self.full_calls.append(item_id)
        item = self.items.get(item_id)
        if item is None or item_id in self.vanished:
            return Result.Err(ErrorCode.NOT_FOUND, "File not found", id=item_id)
        return Result.Ok(item)

    async def aclose(self) -> None:
        self.closed = True
