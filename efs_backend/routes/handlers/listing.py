"""
Filtered, sorted, paginated item listing.

Endpoint: GET /getList
Query params: limit, offset, orderBy, keyword, ext, tags, folders
"""
from __future__ import annotations

import logging

from aiohttp import web

from efs_backend.features.query import parse_query_filter, serialize_page
from efs_backend.shared import get_logger, log_structured

from ..core import _internal_error_response, _json_response, _require_services

logger = get_logger(__name__)


async def get_list(request: web.Request) -> web.Response:
    services, error = _require_services(request)
    if error is not None or services is None:
        return _json_response(error)
    try:
        query = parse_query_filter(request.query)
        if logger.isEnabledFor(logging.DEBUG):
            log_structured(
                logger, logging.DEBUG, "getList",
                keyword=query.keyword, ext=list(query.extensions), tags=list(query.tags),
                folders=list(query.folders), order_by=query.order_by, limit=query.limit, offset=query.offset,
            )
        result = await services.query.list_items(query)
        if not result.ok:
            return _json_response(result)
        return _json_response(result.map(serialize_page))
    except Exception as exc:
        return _internal_error_response(exc, "getList")


def register_listing_routes(routes: web.RouteTableDef) -> None:
    routes.get("/getList")(get_list)
    routes.get("/getList/")(get_list)
