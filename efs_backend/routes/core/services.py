"""
Access to the per-application service record.
"""
from __future__ import annotations

from typing import Any

from aiohttp import web

from efs_backend.deps import Services
from efs_backend.shared import ErrorCode, Result

APP_KEY_SERVICES: web.AppKey[Services] = web.AppKey("efs_services", Services)


def _require_services(request: web.Request) -> tuple[Services | None, Result[Any] | None]:
    services = request.app.get(APP_KEY_SERVICES)
    if services is not None:
        return services, None
    return None, Result.Err(ErrorCode.UNCONFIGURED, "Services are unavailable")
