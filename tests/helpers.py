"""Shared helpers for catalog tests."""
import struct
from pathlib import Path


async def insert_media(db, path, file_type="image", *, size=100, created_at=0, width=None, height=None,
                       duration=None, starred=False) -> int:
    """Insert one catalog row directly and return its id."""
    res = await db.aexecute(
        """
        INSERT INTO media_items (path, file_type, size_bytes, created_at, width, height, duration_sec, starred)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (path, file_type, size, created_at, width, height, duration, 1 if starred else 0),
    )
    assert res.ok, res.error
    return int(res.data)


def mp4_bytes(duration_s: float, timescale: int = 1000) -> bytes:
    """Smallest ISO-BMFF file carrying a movie header: ftyp + moov/mvhd."""
    ftyp = struct.pack(">I4s4sI4s", 20, b"ftyp", b"isom", 0x200, b"isom")
    body = struct.pack(">B3xIIII", 0, 3_700_000_000, 3_700_000_000, timescale, int(duration_s * timescale))
    body += struct.pack(">IH", 0x00010000, 0x0100) + b"\x00" * 10
    body += struct.pack(">9I", 0x00010000, 0, 0, 0, 0x00010000, 0, 0, 0, 0x40000000)
    body += struct.pack(">7I", 0, 0, 0, 0, 0, 0, 2)
    mvhd = struct.pack(">I4s", 8 + len(body), b"mvhd") + body
    moov = struct.pack(">I4s", 8 + len(mvhd), b"moov") + mvhd
    return ftyp + moov


def write_mp4(path: Path, duration_s: float) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(mp4_bytes(duration_s))
    return path
