"""
Random item selection.

Candidates are filtered on light records only; the single winner is the
only item ever fully resolved.
"""
from __future__ import annotations

import random

from efs_backend.features.library.models import Item
from efs_backend.features.library.source import ItemSource
from efs_backend.features.query.engine import matches
from efs_backend.features.query.filters import QueryFilter
from efs_backend.shared import ErrorCode, Result, get_logger

logger = get_logger(__name__)


class RandomSelector:
    def __init__(self, source: ItemSource, rng: random.Random):
        self._source = source
        self._rng = rng

    async def candidate_ids(self, query: QueryFilter) -> Result[list[str]]:
        scanned = await self._source.scan_lightweight()
        if not scanned.ok:
            if scanned.code == ErrorCode.UNCONFIGURED.value:
                return Result.Err(scanned.code, scanned.error or "Library unavailable")
            logger.warning("Random selection scan failed: [%s] %s", scanned.code, scanned.error)
            return Result.Ok([])
        return Result.Ok([light.id for light in scanned.data or [] if matches(light, query)])

    async def pick_id(self, query: QueryFilter) -> Result[str]:
        """
        Choose one matching id uniformly at random.

        `Err(NOT_FOUND)` when nothing matches, `Err(UNCONFIGURED)` when the
        library is not available.
        """
        candidates = await self.candidate_ids(query)
        if not candidates.ok:
            return Result.Err(candidates.code, candidates.error or "Library unavailable")
        ids = candidates.data or []
        if not ids:
            return Result.Err(ErrorCode.NOT_FOUND, "No matching files found")
        return Result.Ok(ids[self._rng.randrange(len(ids))], candidates=len(ids))

    async def pick_full(self, query: QueryFilter) -> Result[Item]:
        picked = await self.pick_id(query)
        if not picked.ok or picked.data is None:
            return Result.Err(picked.code, picked.error or "No matching files found")
        full = await self._source.get_full(picked.data)
        if not full.ok:
            # No retry: a winner that vanished is reported as a miss.
            logger.debug("Random winner %s not resolvable: [%s] %s", picked.data, full.code, full.error)
            if full.code == ErrorCode.NOT_FOUND.value:
                return Result.Err(full.code, "File not found", id=picked.data)
            return Result.Err(full.code, full.error or "Failed to load file", id=picked.data)
        return full
