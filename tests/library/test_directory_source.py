import os
from datetime import datetime, timezone

import pytest
from PIL import Image

from efs_backend.features.library import DirectoryItemSource
from tests.fakes import FIXED_NOW, fixed_clock, png_header, write_item


@pytest.mark.asyncio
async def test_unconfigured_library():
    source = DirectoryItemSource(None)
    ids = await source.enumerate_ids()
    assert ids.code == "UNCONFIGURED"
    full = await source.get_full("X")
    assert full.code == "UNCONFIGURED"


@pytest.mark.asyncio
async def test_missing_images_dir_is_unconfigured(tmp_path):
    ids = await DirectoryItemSource(tmp_path / "nowhere").enumerate_ids()
    assert ids.code == "UNCONFIGURED"


@pytest.mark.asyncio
async def test_enumerates_item_directories(library):
    write_item(library, "B1", {"name": "b", "ext": "png"})
    write_item(library, "A1", {"name": "a", "ext": "png"})
    (library / "images" / "stray.txt").write_text("x")
    (library / "images" / "noinfo").mkdir()
    ids = await DirectoryItemSource(library).enumerate_ids()
    assert ids.data == ["A1", "B1"]


@pytest.mark.asyncio
async def test_malformed_and_deleted_items_are_skipped(library):
    write_item(library, "OK1", {"name": "ok", "ext": "jpg"})
    write_item(library, "DEL", {"name": "gone", "ext": "jpg", "isDeleted": True})
    bad = library / "images" / "BAD.info"
    bad.mkdir()
    (bad / "metadata.json").write_text("{not json", encoding="utf-8")
    (library / "images" / "NOMETA.info").mkdir()

    source = DirectoryItemSource(library)
    scanned = await source.scan_lightweight()
    assert [light.id for light in scanned.data] == ["OK1"]
    assert (await source.get_full("DEL")).code == "NOT_FOUND"
    assert (await source.get_full("BAD")).code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_unsafe_ids_are_not_found(library):
    source = DirectoryItemSource(library)
    assert (await source.get_full("../etc")).code == "NOT_FOUND"
    assert await source.get_lightweight("..") is None


@pytest.mark.asyncio
async def test_payload_skips_sidecars_and_thumbnails(library):
    info = write_item(library, "P1", {"name": "photo", "ext": "png"}, payload=None)
    (info / "photo_thumbnail.png").write_bytes(b"thumb")
    (info / "extra.json").write_text("{}")
    (info / "photo.png").write_bytes(b"0123456789")
    (info / "zzz.png").write_bytes(b"later")

    full = await DirectoryItemSource(library).get_full("P1")
    assert full.ok
    assert full.data.payload_location.name == "photo.png"
    assert full.data.size == 10


@pytest.mark.asyncio
async def test_missing_payload_keeps_item(library):
    write_item(library, "NP", {"name": "x", "ext": "png", "size": 42}, payload=None)
    full = await DirectoryItemSource(library, clock=fixed_clock).get_full("NP")
    assert full.ok
    assert full.data.payload_location is None
    assert full.data.size == 42
    assert full.data.created_at == FIXED_NOW


@pytest.mark.asyncio
async def test_metadata_timestamps_win_over_stat(library):
    write_item(
        library, "T1",
        {"name": "t", "ext": "mp4", "btime": 1700000000000, "modificationTime": 1700000500000},
        b"video",
    )
    full = await DirectoryItemSource(library, clock=fixed_clock).get_full("T1")
    item = full.data
    assert item.type == "video"
    assert item.created_at == datetime.fromtimestamp(1700000000, tz=timezone.utc)
    assert item.modified_at == datetime.fromtimestamp(1700000500, tz=timezone.utc)


@pytest.mark.asyncio
async def test_stat_fills_missing_timestamps(library):
    info = write_item(library, "T2", {"name": "t", "ext": "txt"}, b"text")
    payload = info / "t.txt"
    os.utime(payload, (1600000000, 1600000000))
    item = (await DirectoryItemSource(library, clock=fixed_clock).get_full("T2")).data
    assert item.modified_at == datetime.fromtimestamp(1600000000, tz=timezone.utc)
    assert item.created_at.tzinfo is not None
    assert item.type == "document"
    assert item.width is None and item.height is None


@pytest.mark.asyncio
async def test_image_dimensions_fall_back_to_pixels(library):
    info = write_item(library, "IMG", {"name": "pic", "ext": "png"}, payload=None)
    Image.new("RGB", (7, 3)).save(info / "pic.png")
    item = (await DirectoryItemSource(library).get_full("IMG")).data
    assert (item.width, item.height) == (7, 3)


@pytest.mark.asyncio
async def test_stored_dimensions_win(library):
    info = write_item(library, "IMG2", {"name": "pic", "ext": "png", "width": 640, "height": 480}, payload=None)
    Image.new("RGB", (7, 3)).save(info / "pic.png")
    item = (await DirectoryItemSource(library).get_full("IMG2")).data
    assert (item.width, item.height) == (640, 480)


@pytest.mark.asyncio
async def test_mismatched_metadata_id_is_skipped(library):
    info = write_item(library, "REAL", {"name": "x", "ext": "png"})
    (info / "metadata.json").write_text('{"id": "OTHER", "name": "x"}', encoding="utf-8")
    assert await DirectoryItemSource(library).get_lightweight("REAL") is None


@pytest.mark.asyncio
async def test_undecodable_metadata_is_skipped(library):
    write_item(library, "GOOD", {"name": "good", "ext": "png"})
    broken = library / "images" / "UTF.info"
    broken.mkdir()
    (broken / "metadata.json").write_bytes(b'{"name": "\xff\xfe"}')

    source = DirectoryItemSource(library)
    scanned = await source.scan_lightweight()
    assert [light.id for light in scanned.data] == ["GOOD"]
    assert (await source.get_full("UTF")).code == "NOT_FOUND"


@pytest.mark.asyncio
async def test_oversized_image_header_has_no_dimensions(library):
    info = write_item(library, "HUGE", {"name": "huge", "ext": "png"}, payload=None)
    (info / "huge.png").write_bytes(png_header(60000, 60000))
    full = await DirectoryItemSource(library).get_full("HUGE")
    assert full.ok
    assert (full.data.width, full.data.height) == (None, None)


def test_blocking_loader_without_library_is_unconfigured():
    assert DirectoryItemSource(None)._load_full("X").code == "UNCONFIGURED"
