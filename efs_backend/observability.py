"""
Observability helpers (request id + timing) for aiohttp routes.
"""
from __future__ import annotations

import time
from typing import Awaitable, Callable
from uuid import uuid4

from aiohttp import web

from .shared import get_logger, request_id_var
from .utils import env_bool, env_float

# Client disconnects are benign: page refresh, navigation, aborted media loads.
# asyncio.CancelledError is deliberately absent; it must propagate.
_CLIENT_DISCONNECT_ERRNO = frozenset({
    10053,  # WSAECONNABORTED (Windows)
    10054,  # WSAECONNRESET (Windows)
    104,    # ECONNRESET (Linux/macOS)
    32,     # EPIPE (Linux/macOS)
    9,      # EBADF (connection closed)
})

MS_PER_S = 1000.0
_DEFAULT_SLOW_MS = 750.0
REQUEST_ID_HEADER = "X-Request-ID"

_APPKEY_OBS_INSTALLED = web.AppKey("efs_observability_installed", bool)
_REQUEST_ID_KEY = web.RequestKey("efs_request_id", str)

logger = get_logger(__name__)


def _is_client_disconnect(exc: BaseException) -> bool:
    if isinstance(exc, (ConnectionResetError, BrokenPipeError, ConnectionAbortedError)):
        return True
    if isinstance(exc, OSError):
        if getattr(exc, "errno", None) in _CLIENT_DISCONNECT_ERRNO:
            return True
        if getattr(exc, "winerror", None) in _CLIENT_DISCONNECT_ERRNO:
            return True
    return False


def _new_request_id() -> str:
    return uuid4().hex


def _get_request_id(request: web.Request) -> str:
    rid = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    return rid[:128] or _new_request_id()


def _slow_threshold_ms() -> float:
    return env_float("EFS_OBS_SLOW_MS", _DEFAULT_SLOW_MS)


def _should_log(status: int | None, duration_ms: float) -> bool:
    if env_bool("EFS_OBS_LOG_ALL", False):
        return True
    if status is None or status >= 500:
        return True
    return duration_ms >= _slow_threshold_ms()


@web.middleware
async def request_context_middleware(
    request: web.Request,
    handler: Callable[[web.Request], Awaitable[web.StreamResponse]],
) -> web.StreamResponse:
    """Assign a request id, time the handler, and log slow or failed requests."""
    rid = _get_request_id(request)
    request[_REQUEST_ID_KEY] = rid
    token = request_id_var.set(rid)
    start = time.perf_counter()
    status: int | None = None
    try:
        response = await handler(request)
        status = response.status
        return response
    except web.HTTPException as exc:
        status = exc.status
        raise
    except Exception as exc:
        if _is_client_disconnect(exc):
            logger.debug("Client disconnected during %s %s", request.method, request.path)
            status = 499
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * MS_PER_S
        if _should_log(status, duration_ms):
            logger.info("%s %s -> %s (%.1fms)", request.method, request.path, status, duration_ms)
        request_id_var.reset(token)


async def _attach_request_id(request: web.Request, response: web.StreamResponse) -> None:
    rid = request.get(_REQUEST_ID_KEY)
    if rid:
        response.headers[REQUEST_ID_HEADER] = rid


def ensure_observability(app: web.Application) -> None:
    """Install request-id middleware and header hook once per app."""
    if app.get(_APPKEY_OBS_INSTALLED):
        return
    app.middlewares.append(request_context_middleware)
    app.on_response_prepare.append(_attach_request_id)
    app[_APPKEY_OBS_INSTALLED] = True
