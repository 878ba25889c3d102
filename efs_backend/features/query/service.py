"""
Listing service: light scan -> match -> full resolve -> sort -> paginate.

Only items that pass the filter are fully resolved.
"""
from __future__ import annotations

import asyncio
import random
from typing import Any

from efs_backend.features.library.models import Item, LightItem, serialize_item
from efs_backend.features.library.source import ItemSource
from efs_backend.shared import ErrorCode, Result, get_logger, timer

from .engine import Page, matches, paginate, sort_items
from .filters import QueryFilter

logger = get_logger(__name__)

_RESOLVE_CONCURRENCY = 16


class LibraryQueryService:
    def __init__(self, source: ItemSource, rng: random.Random):
        self._source = source
        self._rng = rng

    async def matching_light_items(self, query: QueryFilter) -> Result[list[LightItem]]:
        """
        Light items passing `query`.

        Upstream catalog failures degrade to an empty list; an unconfigured
        library stays an error so callers can answer 503.
        """
        with timer("library light scan", logger):
            scanned = await self._source.scan_lightweight()
        if not scanned.ok:
            if scanned.code == ErrorCode.UPSTREAM_ERROR.value:
                logger.warning("Item source failed, answering with no items: %s", scanned.error)
                return Result.Ok([], degraded=True)
            return Result.Err(scanned.code, scanned.error or "Library unavailable")
        survivors = [light for light in scanned.data or [] if matches(light, query)]
        return Result.Ok(survivors, **scanned.meta)

    async def _resolve_all(self, ids: list[str]) -> list[Item]:
        semaphore = asyncio.Semaphore(_RESOLVE_CONCURRENCY)

        async def _one(item_id: str) -> Item | None:
            async with semaphore:
                full = await self._source.get_full(item_id)
            if full.ok:
                return full.data
            if full.code == ErrorCode.NOT_FOUND.value:
                logger.debug("Item %s vanished before resolution", item_id)
            else:
                logger.warning("Skipping item %s: [%s] %s", item_id, full.code, full.error)
            return None

        resolved = await asyncio.gather(*(_one(item_id) for item_id in ids))
        return [item for item in resolved if item is not None]

    async def list_items(self, query: QueryFilter) -> Result[Page[Item]]:
        survivors = await self.matching_light_items(query)
        if not survivors.ok:
            return Result.Err(survivors.code, survivors.error or "Library unavailable")
        items = await self._resolve_all([light.id for light in survivors.data or []])
        ordered = sort_items(items, query.order_by, self._rng)
        page = paginate(ordered, query.limit, query.offset)
        logger.debug(
            "Returning %d files (total: %d, limit: %d, offset: %d)",
            len(page.items), page.total, page.limit, page.offset,
        )
        return Result.Ok(page, **survivors.meta)


def serialize_page(page: Page[Item]) -> dict[str, Any]:
    return {
        "files": [serialize_item(item) for item in page.items],
        "total": page.total,
        "limit": page.limit,
        "offset": page.offset,
    }
