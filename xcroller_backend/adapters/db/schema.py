"""
Catalog schema: media items, watched folders and saved feeds.
"""
from __future__ import annotations

from ...shared import Result, get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS media_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    path TEXT UNIQUE NOT NULL,
    file_type TEXT NOT NULL,
    size_bytes INTEGER NOT NULL,
    created_at INTEGER NOT NULL,
    width INTEGER,
    height INTEGER,
    duration_sec REAL,
    starred BOOLEAN DEFAULT 0
);

CREATE TABLE IF NOT EXISTS folders (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    path TEXT UNIQUE NOT NULL,
    is_active BOOLEAN DEFAULT 1
);

CREATE TABLE IF NOT EXISTS feeds (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    folder_paths TEXT NOT NULL,
    filter_config TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_media_created ON media_items(created_at DESC);
CREATE INDEX IF NOT EXISTS idx_media_starred ON media_items(starred);
CREATE INDEX IF NOT EXISTS idx_media_type ON media_items(file_type);
"""


async def init_schema(db) -> Result[bool]:
    """Create tables and indexes if they do not exist yet."""
    res = await db.aexecutescript(SCHEMA_SQL)
    if not res.ok:
        logger.error("Schema initialization failed: %s", res.error)
        return res
    logger.debug("Catalog schema ready at %s", getattr(db, "db_path", "?"))
    return Result.Ok(True)
