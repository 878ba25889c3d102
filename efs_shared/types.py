"""
Shared types, enums, and constants.
"""
import os
from enum import Enum
from typing import Final, Literal

# File type classifications
FileKind = Literal["image", "video", "audio", "document", "other"]


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    # Client
    NOT_FOUND = "NOT_FOUND"

    # Library availability
    UNCONFIGURED = "UNCONFIGURED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"

    # Server / infrastructure
    READ_ERROR = "READ_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# HTTP status per error code; anything unlisted is a server error.
ERROR_STATUS: Final[dict[str, int]] = {
    ErrorCode.NOT_FOUND.value: 404,
    ErrorCode.UNCONFIGURED.value: 503,
}

# File extensions by type
EXTENSIONS: Final[dict[FileKind, frozenset[str]]] = {
    "image": frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg", ".tiff"}),
    "video": frozenset({".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm", ".mkv"}),
    "audio": frozenset({".mp3", ".wav", ".flac", ".aac", ".ogg", ".m4a"}),
    "document": frozenset({".pdf", ".doc", ".docx", ".txt", ".rtf", ".js"}),
    "other": frozenset(),
}

VISUAL_KINDS: Final[frozenset[str]] = frozenset({"image", "video"})

DEFAULT_MIME_TYPE: Final[str] = "application/octet-stream"

MIME_TYPES: Final[dict[str, str]] = {
    # Images
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".tiff": "image/tiff",
    # Videos
    ".mp4": "video/mp4",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
    # Audio
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    # Documents
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".txt": "text/plain",
    ".rtf": "application/rtf",
}


def normalize_extension(value: object) -> str:
    """
    Normalize an extension to lower case with a single leading dot.

    Returns an empty string for blank input. Accepts "PNG", ".png" and "png".
    """
    if value is None:
        return ""
    text = str(value).strip().lower()
    if not text:
        return ""
    text = text.lstrip(".")
    return f".{text}" if text else ""


def extension_of(filename: str) -> str:
    """Lower-cased extension of a file name, including the leading dot."""
    return normalize_extension(os.path.splitext(str(filename or ""))[1])


def classify_extension(ext: str) -> FileKind:
    """
    Classify a file by extension.

    Args:
        ext: Extension with or without the leading dot

    Returns:
        File kind (image, video, audio, document, other)
    """
    normalized = normalize_extension(ext)
    for kind, exts in EXTENSIONS.items():
        if normalized in exts:
            return kind
    return "other"


def mime_type_for(ext: str) -> str:
    """MIME type for an extension, `application/octet-stream` when unknown."""
    return MIME_TYPES.get(normalize_extension(ext), DEFAULT_MIME_TYPE)
