"""Visual dimension normalization helpers."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError

from efs_backend.shared import VISUAL_KINDS, get_logger

logger = get_logger(__name__)


def coerce_dimension(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        s = value.strip().lower().replace("px", "").strip()
        if not s:
            return None
        value = s
    try:
        out = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return out if out > 0 else None


def read_image_size(path: Path) -> tuple[int | None, int | None]:
    """
    Read pixel dimensions from an image header.

    Pillow opens lazily, so only the header is parsed. Returns (None, None)
    for unreadable or non-raster files (e.g. SVG) and for headers Pillow
    refuses as decompression bombs.
    """
    try:
        with Image.open(path) as img:
            return coerce_dimension(img.width), coerce_dimension(img.height)
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as exc:
        logger.debug("Could not read image size for %s: %s", path.name, exc)
        return None, None


def resolve_dimensions(
    metadata: dict[str, Any],
    *,
    kind: str,
    payload: Path | None,
) -> tuple[int | None, int | None]:
    """
    Width/height for visual media; always (None, None) for other kinds.

    Stored metadata wins; images missing either value fall back to the
    payload header.
    """
    if kind not in VISUAL_KINDS:
        return None, None
    w = coerce_dimension(metadata.get("width"))
    h = coerce_dimension(metadata.get("height"))
    if (w is None or h is None) and kind == "image" and payload is not None:
        pw, ph = read_image_size(payload)
        w = w if w is not None else pw
        h = h if h is not None else ph
    return w, h
