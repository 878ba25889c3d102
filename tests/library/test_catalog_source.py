import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from efs_backend.features.library import CatalogItemSource
from tests.fakes import fixed_clock, write_item


def _catalog_app(records, *, library_path=None, fail_list=False):
    """Fake catalog API speaking the `{status, data}` envelope."""
    calls = {"list": [], "info": []}
    routes = web.RouteTableDef()

    @routes.get("/api/library/info")
    async def _library_info(request):
        if library_path is None:
            return web.json_response({"status": "error", "message": "no library"})
        return web.json_response({"status": "success", "data": {"library": {"path": str(library_path)}}})

    @routes.get("/api/item/list")
    async def _item_list(request):
        limit = int(request.query["limit"])
        offset = int(request.query["offset"])
        calls["list"].append((limit, offset))
        if fail_list:
            return web.json_response({"status": "error"}, status=500)
        return web.json_response({"status": "success", "data": records[offset : offset + limit]})

    @routes.get("/api/item/info")
    async def _item_info(request):
        item_id = request.query.get("id")
        calls["info"].append(item_id)
        for record in records:
            if record["id"] == item_id:
                return web.json_response({"status": "success", "data": record})
        return web.json_response({"status": "error", "message": "not found"}, status=404)

    app = web.Application()
    app.add_routes(routes)
    return app, calls


async def _start(app):
    server = TestServer(app)
    await server.start_server()
    return server, str(server.make_url("/")).rstrip("/")


@pytest.mark.asyncio
async def test_paged_listing_and_deleted_records():
    records = [{"id": f"I{n}", "name": f"n{n}", "ext": "png"} for n in range(5)]
    records.append({"id": "GONE", "name": "gone", "ext": "png", "isDeleted": True})
    records.append({"id": "I0", "name": "dup", "ext": "png"})
    app, calls = _catalog_app(records)
    server, url = await _start(app)
    source = CatalogItemSource(url, page_size=2)
    try:
        ids = await source.enumerate_ids()
        assert ids.data == ["I0", "I1", "I2", "I3", "I4"]
        assert calls["list"] == [(2, 0), (2, 2), (2, 4), (2, 6)]
        scanned = await source.scan_lightweight()
        assert [light.name for light in scanned.data] == ["n0", "n1", "n2", "n3", "n4"]
    finally:
        await source.aclose()
        await server.close()


@pytest.mark.asyncio
async def test_upstream_failure_is_reported():
    app, _ = _catalog_app([], fail_list=True)
    server, url = await _start(app)
    source = CatalogItemSource(url)
    try:
        scanned = await source.scan_lightweight()
        assert scanned.code == "UPSTREAM_ERROR"
    finally:
        await source.aclose()
        await server.close()


@pytest.mark.asyncio
async def test_unreachable_catalog_is_upstream_error(unused_tcp_port):
    source = CatalogItemSource(f"http://127.0.0.1:{unused_tcp_port}", timeout=2)
    try:
        assert (await source.enumerate_ids()).code == "UPSTREAM_ERROR"
        assert (await source.get_full("X")).code == "UPSTREAM_ERROR"
    finally:
        await source.aclose()


@pytest.mark.asyncio
async def test_get_full_uses_explicit_path(tmp_path):
    payload = tmp_path / "clip.mp4"
    payload.write_bytes(b"12345")
    records = [{"id": "V1", "name": "clip", "ext": "mp4", "filePath": str(payload), "tags": ["t"]}]
    app, calls = _catalog_app(records)
    server, url = await _start(app)
    source = CatalogItemSource(url, clock=fixed_clock)
    try:
        full = await source.get_full("V1")
        assert full.ok
        assert full.data.payload_location == payload
        assert full.data.size == 5
        assert full.data.type == "video"
        assert calls["info"] == ["V1"]
        missing = await source.get_full("NOPE")
        assert missing.code == "NOT_FOUND"
    finally:
        await source.aclose()
        await server.close()


@pytest.mark.asyncio
async def test_payload_falls_back_to_library_layout(library):
    write_item(library, "L1", {"name": "pic", "ext": "jpg"}, b"jpegbytes")
    app, _ = _catalog_app([{"id": "L1", "name": "pic", "ext": "jpg"}], library_path=library)
    server, url = await _start(app)
    source = CatalogItemSource(url)
    try:
        refreshed = await source.refresh_library_path()
        assert refreshed.ok
        assert source.library_path == library
        full = await source.get_full("L1")
        assert full.data.payload_location == library / "images" / "L1.info" / "pic.jpg"
        assert full.data.size == len(b"jpegbytes")
    finally:
        await source.aclose()
        await server.close()


@pytest.mark.asyncio
async def test_library_info_failure_is_reported():
    app, _ = _catalog_app([])
    server, url = await _start(app)
    source = CatalogItemSource(url)
    try:
        refreshed = await source.refresh_library_path()
        assert refreshed.code == "UPSTREAM_ERROR"
        assert source.library_path is None
    finally:
        await source.aclose()
        await server.close()


@pytest.mark.asyncio
async def test_catalog_ignoring_offset_stops_paging():
    records = [{"id": f"R{n}", "name": f"r{n}", "ext": "jpg"} for n in range(3)]
    calls = []

    async def _item_list(request):
        calls.append(request.query["offset"])
        limit = int(request.query["limit"])
        return web.json_response({"status": "success", "data": records[:limit]})

    app = web.Application()
    app.router.add_get("/api/item/list", _item_list)
    server, url = await _start(app)
    source = CatalogItemSource(url, page_size=2)
    try:
        ids = await source.enumerate_ids()
        assert ids.data == ["R0", "R1"]
        assert calls == ["0", "2"]
    finally:
        await source.aclose()
        await server.close()
