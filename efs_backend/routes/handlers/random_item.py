"""
Random item endpoints.

GET /getRandom       -> metadata of one uniformly random matching item
GET /getRandomMedia  -> the payload bytes of one uniformly random matching item
Query params: keyword, ext, tags, folders
"""
from __future__ import annotations

from aiohttp import web

from efs_backend.features.library import serialize_item
from efs_backend.features.query import parse_query_filter

from ..core import _internal_error_response, _json_response, _require_services, stream_payload


async def get_random(request: web.Request) -> web.Response:
    services, error = _require_services(request)
    if error is not None or services is None:
        return _json_response(error)
    try:
        picked = await services.selector.pick_full(parse_query_filter(request.query))
        return _json_response(picked.map(serialize_item))
    except Exception as exc:
        return _internal_error_response(exc, "getRandom")


async def get_random_media(request: web.Request) -> web.StreamResponse:
    services, error = _require_services(request)
    if error is not None or services is None:
        return _json_response(error)
    try:
        picked = await services.selector.pick_id(parse_query_filter(request.query))
        if not picked.ok or picked.data is None:
            return _json_response(picked)
        handle = await services.resolver.resolve_by_id(picked.data)
        if not handle.ok or handle.data is None:
            return _json_response(handle)
        return await stream_payload(request, handle.data, chunk_size=services.config.stream_chunk_size)
    except Exception as exc:
        return _internal_error_response(exc, "getRandomMedia")


def register_random_routes(routes: web.RouteTableDef) -> None:
    routes.get("/getRandom")(get_random)
    routes.get("/getRandom/")(get_random)
    routes.get("/getRandomMedia")(get_random_media)
    routes.get("/getRandomMedia/")(get_random_media)
