"""
Catalog write operations used by the scanner and the backfill worker.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from ...adapters.db.sqlite import Sqlite
from ...shared import Result

# Insert-if-absent keyed by path. An existing row only gains metadata it is
# missing; id, kind, size, created_at and starred are never touched.
UPSERT_MEDIA_SQL = """
INSERT INTO media_items (path, file_type, size_bytes, created_at, width, height, duration_sec)
VALUES (?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(path) DO UPDATE SET
    width = CASE WHEN media_items.width IS NULL THEN excluded.width ELSE media_items.width END,
    height = CASE WHEN media_items.width IS NULL THEN excluded.height ELSE media_items.height END,
    duration_sec = COALESCE(media_items.duration_sec, excluded.duration_sec)
WHERE (media_items.width IS NULL AND excluded.width IS NOT NULL)
   OR (media_items.duration_sec IS NULL AND excluded.duration_sec IS NOT NULL)
"""

MediaRow = Tuple[str, str, int, int, Optional[int], Optional[int], Optional[float]]


async def upsert_media_rows(db: Sqlite, rows: List[MediaRow]) -> Result[int]:
    """Write one scan batch. Returns the number of rows inserted or enriched."""
    if not rows:
        return Result.Ok(0)
    return await db.aexecutemany(UPSERT_MEDIA_SQL, rows)


async def list_missing_metadata(db: Sqlite) -> Result[List[Dict[str, Any]]]:
    """Rows whose intrinsic metadata is still unknown."""
    return await db.aquery(
        """
        SELECT id, path, file_type
        FROM media_items
        WHERE (file_type = 'image' AND width IS NULL)
           OR (file_type = 'video' AND duration_sec IS NULL)
        ORDER BY id
        """
    )


async def fill_media_metadata(
    db: Sqlite,
    media_id: int,
    *,
    width: Optional[int],
    height: Optional[int],
    duration: Optional[float],
) -> Result[Any]:
    """Set metadata fields that are currently NULL; known values are kept."""
    return await db.aexecute(
        """
        UPDATE media_items
        SET width = CASE WHEN width IS NULL THEN ? ELSE width END,
            height = CASE WHEN width IS NULL THEN ? ELSE height END,
            duration_sec = COALESCE(duration_sec, ?)
        WHERE id = ?
        """,
        (width, height, duration, int(media_id)),
    )
