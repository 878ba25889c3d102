"""
Stream a resolved payload to the client.

Headers go out only after the first chunk has been read, so a payload that
cannot be read at all still gets a proper 500 JSON answer. Once headers are
sent, a read failure can only abort the connection.
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import BinaryIO

from aiohttp import web

from efs_backend.features.resolver import PayloadHandle
from efs_backend.shared import ErrorCode, Result, get_logger, sanitize_error_message

from .response import _json_response

logger = get_logger(__name__)

CACHE_CONTROL = "public, max-age=3600"


def safe_disposition_filename(name: str) -> str:
    return str(name or "").replace('"', "").replace(";", "").replace("\r", "").replace("\n", "")[:255]


def _open_payload(path: Path) -> BinaryIO:
    return open(path, "rb")


def _abort_connection(request: web.Request) -> None:
    transport = request.transport
    if transport is not None and not transport.is_closing():
        transport.close()


def _read_error_response(handle: PayloadHandle, exc: OSError) -> web.Response:
    return _json_response(
        Result.Err(
            ErrorCode.READ_ERROR,
            "Error reading file",
            id=handle.item_id,
            details=sanitize_error_message(exc, "Read failed"),
            errno=exc.errno,
        ),
        status=500,
    )


async def stream_payload(request: web.Request, handle: PayloadHandle, *, chunk_size: int) -> web.StreamResponse:
    try:
        fh = await asyncio.to_thread(_open_payload, handle.path)
    except FileNotFoundError:
        logger.error("File vanished before streaming %s: %s", handle.item_id, handle.path)
        return _json_response(Result.Err(ErrorCode.NOT_FOUND, "File not found on disk", id=handle.item_id))
    except OSError as exc:
        logger.error("Error opening %s for %s: %s", handle.path, handle.item_id, exc)
        return _read_error_response(handle, exc)

    try:
        try:
            chunk = await asyncio.to_thread(fh.read, chunk_size)
        except OSError as exc:
            logger.error("Error reading %s for %s: %s", handle.path, handle.item_id, exc)
            return _read_error_response(handle, exc)

        response = web.StreamResponse(status=200)
        response.headers["Content-Type"] = handle.mime_type
        response.headers["Content-Disposition"] = f'inline; filename="{safe_disposition_filename(handle.filename)}"'
        response.headers["Cache-Control"] = CACHE_CONTROL
        response.content_length = handle.size

        try:
            await response.prepare(request)
            while chunk:
                await response.write(chunk)
                chunk = await asyncio.to_thread(fh.read, chunk_size)
            await response.write_eof()
        except ConnectionError as exc:
            logger.debug("Client disconnected while streaming %s: %s", handle.item_id, exc)
        except OSError as exc:
            # Headers are already out; no second status line is possible.
            logger.error(
                "Error streaming %s (%s), closing connection: %s (errno=%s)",
                handle.item_id, handle.path, exc, exc.errno,
            )
            _abort_connection(request)
        return response
    finally:
        fh.close()
