"""
Directory-convention item source.

Walks ``<library>/images/*.info`` on every call; nothing is cached between
requests. All disk access runs off the event loop.
"""
from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from efs_backend.shared import Clock, ErrorCode, Result, get_logger, utc_now

from .models import Item, LightItem
from .payload_locator import (
    METADATA_FILENAME,
    images_dir,
    info_dir_for,
    is_safe_item_id,
    item_id_from_dirname,
    locate_payload,
)
from .record_mapper import build_item, is_deleted, to_light_item
from .source import BaseItemSource

logger = get_logger(__name__)


def _read_metadata(info_dir: Path) -> dict[str, Any] | None:
    path = info_dir / METADATA_FILENAME
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        logger.warning("Failed to read metadata %s: %s", path, exc)
        return None
    try:
        data = json.loads(raw)
    except ValueError as exc:
        # Covers undecodable bytes as well as bad JSON.
        logger.warning("Malformed metadata JSON in %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Metadata in %s is not an object", path)
        return None
    return data


def _list_item_ids(library: Path) -> list[str]:
    root = images_dir(library)
    ids: list[str] = []
    with os.scandir(root) as it:
        for entry in it:
            item_id = item_id_from_dirname(entry.name)
            if item_id is None:
                continue
            try:
                if entry.is_dir():
                    ids.append(item_id)
            except OSError:
                continue
    ids.sort()
    return ids


class DirectoryItemSource(BaseItemSource):
    kind = "filesystem"

    def __init__(self, library: Path | None, *, clock: Clock = utc_now):
        self._library = Path(library) if library is not None else None
        self._clock = clock

    @property
    def library_path(self) -> Path | None:
        return self._library

    def _unconfigured(self) -> Result[Any]:
        return Result.Err(ErrorCode.UNCONFIGURED, "Library path not configured")

    async def enumerate_ids(self) -> Result[list[str]]:
        if self._library is None:
            return self._unconfigured()
        try:
            ids = await asyncio.to_thread(_list_item_ids, self._library)
        except FileNotFoundError:
            return Result.Err(ErrorCode.UNCONFIGURED, "Library images directory not found")
        except OSError as exc:
            logger.error("Failed to enumerate library %s: %s", self._library, exc)
            return Result.Err(ErrorCode.UPSTREAM_ERROR, "Library is not accessible")
        return Result.Ok(ids)

    def _load_light(self, item_id: str) -> LightItem | None:
        if self._library is None or not is_safe_item_id(item_id):
            return None
        record = _read_metadata(info_dir_for(self._library, item_id))
        if record is None or is_deleted(record):
            return None
        stored_id = record.get("id")
        if stored_id is not None and str(stored_id) != item_id:
            logger.warning("Metadata id %r does not match directory id %r", stored_id, item_id)
            return None
        return to_light_item(item_id, record)

    async def get_lightweight(self, item_id: str) -> LightItem | None:
        return await asyncio.to_thread(self._load_light, item_id)

    def _load_full(self, item_id: str) -> Result[Item]:
        if self._library is None:
            return self._unconfigured()
        light = self._load_light(item_id)
        if light is None:
            return Result.Err(ErrorCode.NOT_FOUND, "File not found", id=item_id)
        info_dir = info_dir_for(self._library, item_id)
        try:
            payload = locate_payload(info_dir)
            stat = payload.stat() if payload is not None else None
        except FileNotFoundError:
            payload, stat = None, None
        except OSError as exc:
            logger.error("Failed to inspect item %s in %s: %s", item_id, info_dir, exc)
            return Result.Err(ErrorCode.READ_ERROR, "Failed to inspect item", id=item_id)
        return Result.Ok(build_item(light, payload=payload, stat=stat, clock=self._clock))

    async def get_full(self, item_id: str) -> Result[Item]:
        if self._library is None:
            return self._unconfigured()
        return await asyncio.to_thread(self._load_full, item_id)

    async def scan_lightweight(self) -> Result[list[LightItem]]:
        # One worker-thread hop for the whole scan instead of one per id.
        ids_result = await self.enumerate_ids()
        if not ids_result.ok:
            return Result.Err(ids_result.code, ids_result.error or "Enumeration failed")

        def _scan(ids: list[str]) -> list[LightItem]:
            out: list[LightItem] = []
            for item_id in ids:
                light = self._load_light(item_id)
                if light is not None:
                    out.append(light)
            return out

        return Result.Ok(await asyncio.to_thread(_scan, ids_result.data or []))
