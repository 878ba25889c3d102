"""
Dependency injection - builds services.
Simple, debug-friendly DI without framework magic.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field

from .config import SOURCE_CATALOG, ServerConfig
from .features.library import CatalogItemSource, DirectoryItemSource, ItemSource
from .features.query import LibraryQueryService
from .features.resolver import ItemResolver
from .features.selection import RandomSelector
from .shared import Clock, Result, get_logger, utc_now

logger = get_logger(__name__)


@dataclass
class Services:
    config: ServerConfig
    source: ItemSource
    query: LibraryQueryService
    selector: RandomSelector
    resolver: ItemResolver
    clock: Clock = field(default=utc_now)

    async def aclose(self) -> None:
        await self.source.aclose()


def build_source(config: ServerConfig, *, clock: Clock = utc_now) -> ItemSource:
    if config.source == SOURCE_CATALOG:
        logger.info("Using catalog source at %s", config.catalog_url)
        return CatalogItemSource(
            config.catalog_url,
            library=config.library_path,
            page_size=config.catalog_page_size,
            timeout=config.catalog_timeout,
            clock=clock,
        )
    logger.info("Using filesystem source at %s", config.library_path or "<unset>")
    return DirectoryItemSource(config.library_path, clock=clock)


def build_services(
    config: ServerConfig,
    *,
    source: ItemSource | None = None,
    rng: random.Random | None = None,
    clock: Clock | None = None,
) -> Result[Services]:
    """Wire the query/selection/resolution services around one item source."""
    clock = clock or utc_now
    rng = rng or random.Random()
    try:
        source = source or build_source(config, clock=clock)
    except (OSError, ValueError) as exc:
        logger.error("Failed to initialize item source: %s", exc)
        return Result.Err("UNCONFIGURED", f"Failed to initialize item source: {exc}")
    return Result.Ok(
        Services(
            config=config,
            source=source,
            query=LibraryQueryService(source, rng),
            selector=RandomSelector(source, rng),
            resolver=ItemResolver(source),
            clock=clock,
        )
    )
