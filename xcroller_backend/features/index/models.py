"""
Catalog row types.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

MEDIA_COLUMNS = "id, path, file_type, size_bytes, created_at, width, height, duration_sec, starred"


@dataclass
class MediaItem:
    id: int
    path: str
    file_type: str
    size_bytes: int
    created_at: int
    width: Optional[int] = None
    height: Optional[int] = None
    duration_sec: Optional[float] = None
    starred: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MediaItem":
        duration = row.get("duration_sec")
        return cls(
            id=int(row["id"]),
            path=str(row["path"]),
            file_type=str(row["file_type"]),
            size_bytes=int(row.get("size_bytes") or 0),
            created_at=int(row.get("created_at") or 0),
            width=row.get("width"),
            height=row.get("height"),
            duration_sec=float(duration) if duration is not None else None,
            starred=bool(row.get("starred")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
