"""
Remote catalog item source.

Talks to a catalog HTTP API shaped like Eagle's local API:

    GET /api/library/info          -> {"status": "success", "data": {"library": {"path": ...}}}
    GET /api/item/list?limit&offset -> {"status": "success", "data": [record, ...]}
    GET /api/item/info?id=...       -> {"status": "success", "data": record}

Records are mapped onto the same `Item` shape as the directory source. When
a record carries no payload path, the directory convention under the
catalog's library path locates it.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from aiohttp import ClientError, ClientSession, ClientTimeout

from efs_backend.config import DEFAULT_CATALOG_PAGE_SIZE
from efs_backend.shared import Clock, ErrorCode, Result, get_logger, utc_now

from .models import Item, LightItem
from .payload_locator import info_dir_for, is_safe_item_id, locate_payload
from .record_mapper import build_item, is_deleted, record_payload_path, to_light_item
from .source import BaseItemSource

logger = get_logger(__name__)


class CatalogError(Exception):
    """The catalog answered with something other than a success envelope."""


class CatalogNotFound(CatalogError):
    pass


def _unwrap_envelope(payload: Any) -> Any:
    if not isinstance(payload, dict):
        raise CatalogError("Catalog returned a non-object payload")
    status = str(payload.get("status") or "").lower()
    if status != "success":
        message = payload.get("message") or payload.get("error") or status or "unknown"
        raise CatalogError(f"Catalog reported failure: {message}")
    return payload.get("data")


def _record_id(record: Any) -> str | None:
    if not isinstance(record, dict):
        return None
    value = record.get("id")
    if value in (None, ""):
        return None
    return str(value)


def _resolve_payload_location(record: dict[str, Any], item_id: str, library: Path | None) -> Path | None:
    explicit = record_payload_path(record)
    if explicit is not None:
        return explicit
    if library is None or not is_safe_item_id(item_id):
        return None
    info_dir = info_dir_for(library, item_id)
    try:
        located = locate_payload(info_dir)
    except OSError as exc:
        logger.warning("Failed to scan %s for item %s: %s", info_dir, item_id, exc)
        located = None
    if located is not None:
        return located
    name = str(record.get("name") or "")
    ext = str(record.get("ext") or "").lstrip(".")
    if not name:
        return None
    return info_dir / (f"{name}.{ext}" if ext else name)


class CatalogItemSource(BaseItemSource):
    kind = "catalog"

    def __init__(
        self,
        base_url: str,
        *,
        library: Path | None = None,
        page_size: int = DEFAULT_CATALOG_PAGE_SIZE,
        timeout: float | None = None,
        session: ClientSession | None = None,
        clock: Clock = utc_now,
    ):
        self._base_url = base_url.rstrip("/")
        self._library = Path(library) if library is not None else None
        self._page_size = max(1, int(page_size))
        self._timeout = ClientTimeout(total=timeout)
        self._session = session
        self._owns_session = session is None
        self._clock = clock

    @property
    def library_path(self) -> Path | None:
        return self._library

    def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        session = self._get_session()
        async with session.get(url, params=params) as resp:
            if resp.status == 404:
                raise CatalogNotFound(f"Catalog returned 404 for {path}")
            if resp.status != 200:
                raise CatalogError(f"Catalog returned {resp.status} for {path}")
            payload = await resp.json(content_type=None)
        return _unwrap_envelope(payload)

    async def refresh_library_path(self) -> Result[Path]:
        """Ask the catalog where its library lives (used for payload fallback)."""
        try:
            data = await self._get_json("/api/library/info")
        except (ClientError, asyncio.TimeoutError, CatalogError, ValueError) as exc:
            logger.warning("Catalog library info unavailable: %s", exc)
            return Result.Err(ErrorCode.UPSTREAM_ERROR, "Catalog library info unavailable")
        library = (data or {}).get("library") if isinstance(data, dict) else None
        raw_path = library.get("path") if isinstance(library, dict) else None
        if not raw_path:
            return Result.Err(ErrorCode.UNCONFIGURED, "Catalog did not report a library path")
        self._library = Path(str(raw_path))
        return Result.Ok(self._library)

    async def _fetch_all_records(self) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        seen: set[str] = set()
        offset = 0
        while True:
            page = await self._get_json(
                "/api/item/list",
                params={"limit": str(self._page_size), "offset": str(offset)},
            )
            if not isinstance(page, list):
                raise CatalogError("Catalog item list is not an array")
            fresh = 0
            for record in page:
                item_id = _record_id(record)
                if item_id is not None and item_id not in seen:
                    fresh += 1
                    seen.add(item_id)
                if isinstance(record, dict):
                    records.append(record)
            if len(page) < self._page_size:
                break
            if not fresh:
                # A full page of known ids means the catalog ignores offset.
                logger.warning("Catalog repeated a page at offset %d, stopping", offset)
                break
            offset += self._page_size
        return records

    async def _scan_records(self) -> Result[list[dict[str, Any]]]:
        try:
            records = await self._fetch_all_records()
        except (ClientError, asyncio.TimeoutError, CatalogError, ValueError) as exc:
            logger.error("Catalog query failed: %s", exc)
            return Result.Err(ErrorCode.UPSTREAM_ERROR, "Catalog query failed")
        return Result.Ok([r for r in records if _record_id(r) and not is_deleted(r)])

    async def enumerate_ids(self) -> Result[list[str]]:
        scanned = await self._scan_records()
        if not scanned.ok:
            return Result.Err(scanned.code, scanned.error or "Catalog query failed")
        seen: set[str] = set()
        ids: list[str] = []
        for record in scanned.data or []:
            item_id = _record_id(record)
            if item_id and item_id not in seen:
                seen.add(item_id)
                ids.append(item_id)
        return Result.Ok(ids)

    async def scan_lightweight(self) -> Result[list[LightItem]]:
        scanned = await self._scan_records()
        if not scanned.ok:
            return Result.Err(scanned.code, scanned.error or "Catalog query failed")
        seen: set[str] = set()
        items: list[LightItem] = []
        for record in scanned.data or []:
            item_id = _record_id(record)
            if item_id is None or item_id in seen:
                continue
            seen.add(item_id)
            items.append(to_light_item(item_id, record))
        return Result.Ok(items)

    async def _fetch_record(self, item_id: str) -> Result[dict[str, Any]]:
        try:
            record = await self._get_json("/api/item/info", params={"id": item_id})
        except CatalogNotFound:
            return Result.Err(ErrorCode.NOT_FOUND, "File not found", id=item_id)
        except (ClientError, asyncio.TimeoutError, CatalogError, ValueError) as exc:
            logger.error("Catalog lookup failed for %s: %s", item_id, exc)
            return Result.Err(ErrorCode.UPSTREAM_ERROR, "Catalog lookup failed", id=item_id)
        if not isinstance(record, dict) or is_deleted(record):
            return Result.Err(ErrorCode.NOT_FOUND, "File not found", id=item_id)
        return Result.Ok(record)

    async def get_lightweight(self, item_id: str) -> LightItem | None:
        fetched = await self._fetch_record(item_id)
        if not fetched.ok or fetched.data is None:
            return None
        return to_light_item(item_id, fetched.data)

    def _materialize(self, light: LightItem) -> Item:
        payload = _resolve_payload_location(light.metadata, light.id, self._library)
        stat = None
        if payload is not None:
            try:
                stat = payload.stat()
            except OSError:
                stat = None
        return build_item(light, payload=payload, stat=stat, clock=self._clock)

    async def get_full(self, item_id: str) -> Result[Item]:
        fetched = await self._fetch_record(item_id)
        if not fetched.ok or fetched.data is None:
            return Result.Err(fetched.code, fetched.error or "File not found", **fetched.meta)
        light = to_light_item(item_id, fetched.data)
        return Result.Ok(await asyncio.to_thread(self._materialize, light))

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
