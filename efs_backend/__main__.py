"""
Command-line entry point: ``python -m efs_backend``.
"""
from __future__ import annotations

import argparse
import asyncio
import contextlib
import sys

from .config import VALID_SOURCES, load_config
from .deps import build_services
from .server import FileServer
from .shared import get_logger, get_version

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="efs_backend",
        description="Serve an Eagle media library over a read-only HTTP API.",
    )
    parser.add_argument("--host", help="Bind address (EFS_HOST)")
    parser.add_argument("--port", type=int, help="Listening port (EFS_PORT)")
    parser.add_argument("--library", help="Library root directory (EFS_LIBRARY_PATH)")
    parser.add_argument("--source", choices=VALID_SOURCES, help="Item source (EFS_SOURCE)")
    parser.add_argument("--catalog-url", help="Catalog API base URL (EFS_CATALOG_URL)")
    parser.add_argument(
        "--no-cors",
        dest="enable_cors",
        action="store_false",
        default=None,
        help="Do not send CORS headers",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    return parser


async def _serve(server: FileServer) -> int:
    started = await server.start()
    if not started.ok:
        await server.stop()
        return 1
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config().with_overrides(
        host=args.host,
        port=args.port,
        library_path=args.library,
        source=args.source,
        catalog_url=args.catalog_url.rstrip("/") if args.catalog_url else None,
        enable_cors=args.enable_cors,
    )
    services = build_services(config)
    if not services.ok or services.data is None:
        logger.error("Startup failed: %s", services.error)
        return 1
    server = FileServer(config, services.data)
    with contextlib.suppress(KeyboardInterrupt):
        return asyncio.run(_serve(server))
    logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
