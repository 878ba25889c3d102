"""
Service information endpoint (also the fallback for unmatched GET paths).
"""
from __future__ import annotations

from typing import Any

from aiohttp import web

from efs_backend.deps import Services
from efs_backend.shared import get_version

from ..core import _raw_json_response, _require_services

ENDPOINTS = {
    "getList": "/getList?limit=10&offset=0&orderBy=random&keyword=&ext=&tags=&folders=",
    "getRandom": "/getRandom?keyword=&ext=&tags=&folders=",
    "getRandomMedia": "/getRandomMedia?keyword=&ext=&tags=&folders=",
    "fileById": "/files/{fileId}",
}


def build_service_info(services: Services | None) -> dict[str, Any]:
    info: dict[str, Any] = {
        "status": "ok",
        "message": "Eagle File Server",
        "version": get_version(),
        "endpoints": dict(ENDPOINTS),
    }
    if services is None:
        info.update({"port": None, "source": None, "libraryPath": "not set"})
        return info
    library = services.source.library_path
    info.update(
        {
            "port": services.config.port,
            "source": services.source.kind,
            "libraryPath": str(library) if library is not None else "not set",
        }
    )
    return info


async def service_info(request: web.Request) -> web.Response:
    services, _ = _require_services(request)
    return _raw_json_response(build_service_info(services))


def register_info_routes(routes: web.RouteTableDef) -> None:
    routes.get("/")(service_info)


def register_fallback_routes(routes: web.RouteTableDef) -> None:
    """Must be registered last: catches every GET nothing else matched."""
    routes.get("/{tail:.*}")(service_info)
