"""
Shared types, enums, and constants.
"""
import os
from enum import Enum
from typing import Final, Literal

# File type classifications
FileKind = Literal["image", "video", "unknown"]


class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    # Client / validation
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_JSON = "INVALID_JSON"
    NOT_FOUND = "NOT_FOUND"

    # Server / infrastructure
    DB_ERROR = "DB_ERROR"
    TIMEOUT = "TIMEOUT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Operation errors
    UPDATE_FAILED = "UPDATE_FAILED"
    SCAN_FAILED = "SCAN_FAILED"
    QUERY_FAILED = "QUERY_FAILED"
    EXPORT_FAILED = "EXPORT_FAILED"


# File extensions by type (lowercase, with leading dot)
EXTENSIONS: Final[dict[str, frozenset[str]]] = {
    "image": frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"}),
    "video": frozenset({".mp4", ".webm", ".mov", ".mkv"}),
}

SUPPORTED_EXTENSIONS: Final[frozenset[str]] = EXTENSIONS["image"] | EXTENSIONS["video"]


def _ext_of(filename: str) -> str:
    return os.path.splitext(str(filename or ""))[1].lower()


def classify_file(filename: str) -> FileKind:
    """
    Classify file by extension.

    Args:
        filename: File name or path

    Returns:
        File kind (image, video, unknown)
    """
    ext = _ext_of(filename)
    if ext in EXTENSIONS["video"]:
        return "video"
    if ext in EXTENSIONS["image"]:
        return "image"
    return "unknown"


def is_supported_extension(filename: str) -> bool:
    return _ext_of(filename) in SUPPORTED_EXTENSIONS
