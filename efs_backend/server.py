"""
Process lifecycle: bind the HTTP listener, check the library, shut down cleanly.
"""
from __future__ import annotations

import errno

from aiohttp import web

from .config import ServerConfig
from .deps import Services
from .features.library import CatalogItemSource
from .routes import create_app
from .shared import ErrorCode, Result, get_logger, log_success

logger = get_logger(__name__)


class FileServer:
    """Owns one aiohttp runner bound to ``config.host:config.port``."""

    def __init__(self, config: ServerConfig, services: Services):
        self.config = config
        self.services = services
        self.app: web.Application | None = None
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    @property
    def is_running(self) -> bool:
        return self._site is not None

    @property
    def base_url(self) -> str:
        host = "localhost" if self.config.host in ("127.0.0.1", "0.0.0.0", "") else self.config.host
        return f"http://{host}:{self.bound_port or self.config.port}"

    @property
    def bound_port(self) -> int | None:
        """Actual listening port (useful when configured with port 0)."""
        if self._runner is None:
            return None
        for address in self._runner.addresses:
            if isinstance(address, tuple) and len(address) >= 2:
                return int(address[1])
        return None

    async def check_library(self) -> Result[int]:
        """Count visible items once so misconfiguration shows up at startup."""
        source = self.services.source
        if isinstance(source, CatalogItemSource) and source.library_path is None:
            refreshed = await source.refresh_library_path()
            if refreshed.ok:
                logger.info("Catalog library path: %s", refreshed.data)
        ids = await source.enumerate_ids()
        if not ids.ok:
            logger.warning("Library check failed [%s]: %s", ids.code, ids.error)
            return Result.Err(ids.code, ids.error or "Library check failed")
        count = len(ids.data or [])
        logger.info("Library reachable (%s): %d items", source.kind, count)
        return Result.Ok(count)

    async def start(self) -> Result[str]:
        if self.is_running:
            return Result.Ok(self.base_url)

        await self.check_library()

        self.app = create_app(self.services)
        runner = web.AppRunner(self.app, access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self.config.host, self.config.port)
        try:
            await site.start()
        except OSError as exc:
            await runner.cleanup()
            if exc.errno == errno.EADDRINUSE:
                logger.error(
                    "Port %s is already in use. Please choose a different port.", self.config.port
                )
                return Result.Err(ErrorCode.INTERNAL_ERROR, "Port already in use", port=self.config.port)
            logger.error("Failed to start HTTP server: %s", exc)
            return Result.Err(ErrorCode.INTERNAL_ERROR, f"Failed to start HTTP server: {exc}")

        self._runner = runner
        self._site = site
        url = self.base_url
        log_success(logger, f"Eagle File Server running on {url}")
        logger.info("📁 Library: %s", self.services.source.library_path or "not set")
        logger.info("🔗 Health check: %s/", url)
        logger.info("📝 File serving: %s/files/{fileId}", url)
        logger.info("📋 Get list: %s/getList", url)
        logger.info("🎲 Get random: %s/getRandom | %s/getRandomMedia", url, url)
        return Result.Ok(url)

    async def stop(self) -> None:
        runner, self._runner, self._site = self._runner, None, None
        if runner is not None:
            await runner.cleanup()
            logger.info("Eagle File Server stopped")
        await self.services.aclose()
