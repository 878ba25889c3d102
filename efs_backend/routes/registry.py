"""
Route registration system.
Builds the aiohttp application: CORS, observability, and every handler.
"""
from __future__ import annotations

from collections.abc import Awaitable, Callable

from aiohttp import web

from efs_backend.deps import Services
from efs_backend.observability import ensure_observability
from efs_backend.shared import get_logger

from .core import APP_KEY_SERVICES
from .handlers import (
    register_fallback_routes,
    register_file_routes,
    register_info_routes,
    register_listing_routes,
    register_random_routes,
)

logger = get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@web.middleware
async def preflight_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Answer CORS preflight on any path with an empty 200, before routing."""
    if request.method == "OPTIONS":
        return web.Response(status=200)
    return await handler(request)


async def _apply_cors_headers(request: web.Request, response: web.StreamResponse) -> None:
    # Runs for every response right before headers are sent, streams included.
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value


def register_all_routes(routes: web.RouteTableDef) -> None:
    register_info_routes(routes)
    register_file_routes(routes)
    register_listing_routes(routes)
    register_random_routes(routes)
    register_fallback_routes(routes)


def create_app(services: Services) -> web.Application:
    """Application with routes, preflight handling and optional CORS."""
    app = web.Application()
    app[APP_KEY_SERVICES] = services
    ensure_observability(app)
    app.middlewares.append(preflight_middleware)
    if services.config.enable_cors:
        app.on_response_prepare.append(_apply_cors_headers)

    routes = web.RouteTableDef()
    register_all_routes(routes)
    app.add_routes(routes)
    logger.debug("Registered %d routes", len(app.router.routes()))
    return app
