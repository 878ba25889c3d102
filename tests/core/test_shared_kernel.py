from datetime import datetime, timezone

from efs_backend.shared import (
    Result,
    classify_extension,
    format_timestamp,
    from_epoch,
    mime_type_for,
    normalize_extension,
    parse_timestamp,
    sanitize_error_message,
)


def test_result_helpers():
    ok = Result.Ok(2, source="x")
    assert ok.map(lambda v: v * 3).data == 6
    assert ok.map(lambda v: v * 3).meta == {"source": "x"}
    err = Result.Err("NOT_FOUND", "missing")
    assert err.map(lambda v: v * 3) is err
    assert not err.ok
    assert err.code == "NOT_FOUND"


def test_extension_tables():
    assert normalize_extension("PNG") == ".png"
    assert normalize_extension(" ") == ""
    assert classify_extension("MOV") == "video"
    assert classify_extension("") == "other"
    assert mime_type_for("m4a") == "audio/mp4"
    assert mime_type_for(".js") == "application/octet-stream"


def test_epoch_units():
    assert from_epoch(1700000000) == from_epoch(1700000000000)
    assert from_epoch(0) is None
    assert from_epoch("soon") is None


def test_parse_and_format_timestamps():
    parsed = parse_timestamp("2024-03-04T05:06:07.890Z")
    assert parsed == datetime(2024, 3, 4, 5, 6, 7, 890000, tzinfo=timezone.utc)
    assert format_timestamp(parsed) == "2024-03-04T05:06:07.890Z"
    assert parse_timestamp(datetime(2024, 1, 1)).tzinfo is timezone.utc
    assert parse_timestamp("") is None


def test_sanitize_masks_paths(monkeypatch):
    monkeypatch.delenv("EFS_DEBUG", raising=False)
    message = sanitize_error_message(OSError("cannot open /home/me/lib/a.png"), "Read failed")
    assert message.startswith("Read failed: ")
    assert "/home/me" not in message
    assert sanitize_error_message(None, "Read failed") == "Read failed"


def test_sanitize_keeps_detail_in_debug(monkeypatch):
    monkeypatch.setenv("EFS_DEBUG", "1")
    message = sanitize_error_message(OSError("cannot open /home/me/lib/a.png"), "Read failed")
    assert "/home/me/lib/a.png" in message
