"""
Payload resolution.

Maps an item to a concrete, currently existing byte source. Nothing is
cached: every request re-checks the backing store.
"""
from __future__ import annotations

import asyncio
import os
import stat as stat_mod
from dataclasses import dataclass
from pathlib import Path

from efs_backend.features.library.models import Item
from efs_backend.features.library.source import ItemSource
from efs_backend.shared import ErrorCode, FileKind, Result, classify_extension, extension_of, get_logger, mime_type_for

logger = get_logger(__name__)


@dataclass(frozen=True)
class PayloadHandle:
    item_id: str
    path: Path
    filename: str
    size: int
    mime_type: str
    file_type: FileKind


def _stat_payload(path: Path) -> os.stat_result | None:
    try:
        st = path.stat()
    except FileNotFoundError:
        return None
    if not stat_mod.S_ISREG(st.st_mode):
        return None
    return st


class ItemResolver:
    def __init__(self, source: ItemSource):
        self._source = source

    async def resolve_payload(self, item: Item) -> Result[PayloadHandle]:
        path = item.payload_location
        if path is None:
            logger.warning("Item %s has no payload location", item.id)
            return Result.Err(ErrorCode.NOT_FOUND, "File not found on disk", id=item.id)
        try:
            st = await asyncio.to_thread(_stat_payload, path)
        except OSError as exc:
            logger.error("Failed to stat payload for %s at %s: %s", item.id, path, exc)
            return Result.Err(ErrorCode.READ_ERROR, "Error reading file", id=item.id)
        if st is None:
            logger.error("File path does not exist for %s: %s", item.id, path)
            return Result.Err(ErrorCode.NOT_FOUND, "File not found on disk", id=item.id, filename=path.name)
        # MIME follows the bytes on disk; fall back to the item's extension.
        ext = extension_of(path.name) or item.extension
        return Result.Ok(
            PayloadHandle(
                item_id=item.id,
                path=path,
                filename=path.name,
                size=int(st.st_size),
                mime_type=mime_type_for(ext),
                file_type=classify_extension(ext),
            )
        )

    async def resolve_by_id(self, item_id: str) -> Result[PayloadHandle]:
        full = await self._source.get_full(item_id)
        if not full.ok or full.data is None:
            return Result.Err(full.code, full.error or "File not found", **full.meta)
        return await self.resolve_payload(full.data)
