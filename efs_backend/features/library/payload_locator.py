"""
Directory-per-item convention.

An item lives at ``<library>/images/<id>.info/`` next to its
``metadata.json``. The payload is the first regular file, in file-name
order, that is neither a ``.json`` sidecar nor a generated thumbnail
(``<stem>_thumbnail.<ext>``).
"""
from __future__ import annotations

import os
import re
from pathlib import Path

IMAGES_DIRNAME = "images"
INFO_SUFFIX = ".info"
METADATA_FILENAME = "metadata.json"
THUMBNAIL_SUFFIX = "_thumbnail"

_SAFE_ITEM_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def is_safe_item_id(value: str) -> bool:
    """Reject ids that could escape the images directory."""
    normalized = str(value or "").strip()
    if not normalized or ".." in normalized:
        return False
    return bool(_SAFE_ITEM_ID_RE.match(normalized))


def images_dir(library: Path) -> Path:
    return library / IMAGES_DIRNAME


def info_dir_for(library: Path, item_id: str) -> Path:
    return images_dir(library) / f"{item_id}{INFO_SUFFIX}"


def item_id_from_dirname(name: str) -> str | None:
    if not name.endswith(INFO_SUFFIX):
        return None
    item_id = name[: -len(INFO_SUFFIX)]
    return item_id if is_safe_item_id(item_id) else None


def is_thumbnail(filename: str) -> bool:
    stem, _ = os.path.splitext(filename)
    return stem.lower().endswith(THUMBNAIL_SUFFIX)


def is_payload_candidate(filename: str) -> bool:
    if filename.lower().endswith(".json"):
        return False
    return not is_thumbnail(filename)


def locate_payload(info_dir: Path) -> Path | None:
    """
    Pick the payload file inside an item directory.

    Blocking; callers on the event loop go through ``asyncio.to_thread``.
    Returns None when the directory is missing or holds no candidate.
    """
    try:
        with os.scandir(info_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
            for entry in entries:
                if not is_payload_candidate(entry.name):
                    continue
                try:
                    if entry.is_file(follow_symlinks=False):
                        return Path(entry.path)
                except OSError:
                    continue
    except (FileNotFoundError, NotADirectoryError):
        return None
    return None
