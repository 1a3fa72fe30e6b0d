"""
Metadata prober: pixel dimensions for images, container duration for videos.

Only headers are read. Unreadable or unrecognized files produce an empty
`Metadata`; nothing here raises to the caller.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import hachoir.core.config as hachoir_config
from hachoir.metadata import extractMetadata
from hachoir.parser import createParser
from PIL import Image

from ...shared import get_logger

logger = get_logger(__name__)

# hachoir prints parser warnings to stderr by default.
hachoir_config.quiet = True

# Containers whose duration is read from the ISO-BMFF `moov` header.
DURATION_CONTAINERS = frozenset({".mp4", ".mov"})


@dataclass(frozen=True)
class Metadata:
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None

    @property
    def empty(self) -> bool:
        return self.width is None and self.height is None and self.duration is None


def read_image_size(path: str) -> tuple[int, int] | None:
    """Return `(width, height)` from the image header, or None if unreadable."""
    try:
        # Image.open is lazy: only the header is parsed until pixels are accessed.
        with Image.open(path) as img:
            width, height = img.size
    except Exception as exc:
        logger.debug("Image probe failed for %s: %s", path, exc)
        return None
    if width <= 0 or height <= 0:
        return None
    return int(width), int(height)


def read_video_duration(path: str) -> float | None:
    """Return the container duration in seconds for MP4/MOV files, else None."""
    if os.path.splitext(path)[1].lower() not in DURATION_CONTAINERS:
        return None
    try:
        parser = createParser(path)
        if parser is None:
            return None
        with parser:
            meta = extractMetadata(parser)
        if meta is None or not meta.has("duration"):
            return None
        seconds = meta.get("duration").total_seconds()
    except Exception as exc:
        logger.debug("Video probe failed for %s: %s", path, exc)
        return None
    return float(seconds) if seconds > 0 else None


def probe(path: str, kind: str) -> Metadata:
    """
    Probe intrinsic properties of a media file.

    Args:
        path: File path
        kind: Declared file kind (`image` or `video`)

    Returns:
        Metadata with whatever could be determined; fields are None otherwise.
    """
    if kind == "image":
        size = read_image_size(path)
        if size is None:
            return Metadata()
        return Metadata(width=size[0], height=size[1])
    if kind == "video":
        return Metadata(duration=read_video_duration(path))
    return Metadata()
