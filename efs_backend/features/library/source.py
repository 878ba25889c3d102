"""
ItemSource contract.

A source is the system of record for items. The query layer only talks to
this interface, so a directory-convention library and a remote catalog are
interchangeable.
"""
from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from efs_backend.shared import Result, get_logger

from .models import Item, LightItem

logger = get_logger(__name__)


@runtime_checkable
class ItemSource(Protocol):
    kind: str

    @property
    def library_path(self) -> Path | None: ...

    async def enumerate_ids(self) -> Result[list[str]]: ...

    async def get_lightweight(self, item_id: str) -> LightItem | None: ...

    async def get_full(self, item_id: str) -> Result[Item]: ...

    async def scan_lightweight(self) -> Result[list[LightItem]]: ...

    async def aclose(self) -> None: ...


class BaseItemSource:
    """Shared behaviour: light scans built from enumerate + per-id lookups."""

    kind = "base"

    @property
    def library_path(self) -> Path | None:
        return None

    async def enumerate_ids(self) -> Result[list[str]]:
        raise NotImplementedError

    async def get_lightweight(self, item_id: str) -> LightItem | None:
        raise NotImplementedError

    async def get_full(self, item_id: str) -> Result[Item]:
        raise NotImplementedError

    async def scan_lightweight(self) -> Result[list[LightItem]]:
        ids_result = await self.enumerate_ids()
        if not ids_result.ok:
            return Result.Err(ids_result.code, ids_result.error or "Enumeration failed", **ids_result.meta)
        items: list[LightItem] = []
        for item_id in ids_result.data or []:
            light = await self.get_lightweight(item_id)
            if light is not None:
                items.append(light)
        logger.debug("Light scan produced %d of %d items", len(items), len(ids_result.data or []))
        return Result.Ok(items)

    async def aclose(self) -> None:
        return None
