import random
import socket

import aiohttp
import pytest

from efs_backend.__main__ import build_parser
from efs_backend.config import ServerConfig
from efs_backend.deps import build_services
from efs_backend.server import FileServer
from tests.fakes import FakeSource, make_item


def _server(port, source=None):
    config = ServerConfig(port=port)
    source = source or FakeSource([make_item("A"), make_item("B")])
    services = build_services(config, source=source, rng=random.Random(0))
    return FileServer(config, services.data), source


@pytest.mark.asyncio
async def test_start_serves_and_stop_is_idempotent(unused_tcp_port):
    server, source = _server(unused_tcp_port)
    started = await server.start()
    try:
        assert started.ok
        assert server.is_running
        assert server.bound_port == unused_tcp_port
        async with aiohttp.ClientSession() as session:
            async with session.get(f"http://127.0.0.1:{unused_tcp_port}/") as resp:
                info = await resp.json()
        assert info["status"] == "ok"
        assert info["source"] == "fake"
    finally:
        await server.stop()
    assert not server.is_running
    assert source.closed
    await server.stop()


@pytest.mark.asyncio
async def test_library_check_counts_items(unused_tcp_port):
    server, _ = _server(unused_tcp_port)
    check = await server.check_library()
    assert check.ok
    assert check.data == 2


@pytest.mark.asyncio
async def test_library_check_failure_does_not_block_start(unused_tcp_port):
    server, _ = _server(unused_tcp_port, source=FakeSource([], scan_error="UNCONFIGURED"))
    try:
        assert (await server.check_library()).code == "UNCONFIGURED"
        assert (await server.start()).ok
    finally:
        await server.stop()


@pytest.mark.asyncio
async def test_port_in_use_is_reported(unused_tcp_port):
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", unused_tcp_port))
    blocker.listen(1)
    server, _ = _server(unused_tcp_port)
    try:
        started = await server.start()
        assert not started.ok
        assert started.error == "Port already in use"
        assert not server.is_running
    finally:
        blocker.close()
        await server.stop()


def test_cli_flags_parse():
    args = build_parser().parse_args(["--port", "9000", "--library", "/lib", "--source", "catalog", "--no-cors"])
    assert args.port == 9000
    assert args.library == "/lib"
    assert args.source == "catalog"
    assert args.enable_cors is False
    defaults = build_parser().parse_args([])
    assert defaults.enable_cors is None
    assert defaults.port is None
