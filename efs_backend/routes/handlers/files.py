"""
Serve one item's payload by identifier.

Endpoint: GET /files/{item_id}
"""
from __future__ import annotations

from aiohttp import web

from ..core import _internal_error_response, _json_response, _require_services, stream_payload


async def get_file(request: web.Request) -> web.StreamResponse:
    services, error = _require_services(request)
    if error is not None or services is None:
        return _json_response(error)
    item_id = request.match_info.get("item_id", "")
    try:
        handle = await services.resolver.resolve_by_id(item_id)
        if not handle.ok or handle.data is None:
            return _json_response(handle)
        return await stream_payload(request, handle.data, chunk_size=services.config.stream_chunk_size)
    except Exception as exc:
        return _internal_error_response(exc, "handleFileById")


def register_file_routes(routes: web.RouteTableDef) -> None:
    routes.get("/files/{item_id}")(get_file)
    routes.get("/files/{item_id}/")(get_file)
