"""
Feeds service - saved, named queries scoped to a set of folders.

`folder_paths` and `filter_config` are stored as JSON text columns.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ...adapters.db.sqlite import Sqlite
from ...path_utils import canonical_path
from ...shared import ErrorCode, Result, get_logger
from ...utils import parse_int
from ..index.filters import FilterOptions
from ..index.models import MediaItem
from ..index.searcher import IndexSearcher

logger = get_logger(__name__)

MAX_FEED_NAME_LEN = 120


def _decode_json(raw: Any, fallback: Any, *, feed_id: Any, column: str) -> Any:
    try:
        return json.loads(raw) if raw else fallback
    except (TypeError, ValueError):
        logger.warning("Malformed %s for feed %s, using defaults", column, feed_id)
        return fallback


def _clean_folder_paths(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    out: List[str] = []
    for item in value:
        path = canonical_path(item) if isinstance(item, str) else ""
        if path and path not in out:
            out.append(path)
    return out


@dataclass
class Feed:
    id: Optional[int]
    name: str
    folder_paths: List[str] = field(default_factory=list)
    filter_config: FilterOptions = field(default_factory=FilterOptions)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Feed":
        feed_id = row.get("id")
        folders = _decode_json(row.get("folder_paths"), [], feed_id=feed_id, column="folder_paths")
        config = _decode_json(row.get("filter_config"), {}, feed_id=feed_id, column="filter_config")
        return cls(
            id=int(feed_id) if feed_id is not None else None,
            name=str(row.get("name") or ""),
            folder_paths=_clean_folder_paths(folders),
            filter_config=FilterOptions.from_dict(config if isinstance(config, dict) else {}),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Feed":
        return cls(
            id=parse_int(data.get("id")),
            name=str(data.get("name") or "").strip(),
            folder_paths=_clean_folder_paths(data.get("folder_paths")),
            filter_config=FilterOptions.from_dict(data.get("filter_config") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "folder_paths": list(self.folder_paths),
            "filter_config": self.filter_config.to_dict(),
        }


class FeedService:
    """CRUD for feeds plus running a feed as a query."""

    def __init__(self, db: Sqlite, searcher: IndexSearcher):
        self.db = db
        self.searcher = searcher

    async def list_feeds(self) -> Result[List[Feed]]:
        res = await self.db.aquery("SELECT id, name, folder_paths, filter_config FROM feeds ORDER BY id")
        if not res.ok:
            return Result.Err(ErrorCode.DB_ERROR, res.error or "Failed to list feeds")
        return Result.Ok([Feed.from_row(row) for row in res.data or []])

    async def get_feed(self, feed_id: int) -> Result[Feed]:
        res = await self.db.aquery(
            "SELECT id, name, folder_paths, filter_config FROM feeds WHERE id = ?",
            (int(feed_id),),
        )
        if not res.ok:
            return Result.Err(ErrorCode.DB_ERROR, res.error or "Failed to load feed")
        if not res.data:
            return Result.Err(ErrorCode.NOT_FOUND, f"Feed not found: {feed_id}")
        return Result.Ok(Feed.from_row(res.data[0]))

    async def save_feed(self, feed: Feed) -> Result[Feed]:
        """
        Insert a feed, or update it when `feed.id` is set.

        Returns:
            Result with the stored feed (id filled in on insert)
        """
        name = (feed.name or "").strip()
        if not name:
            return Result.Err(ErrorCode.INVALID_INPUT, "Feed name is required")
        if len(name) > MAX_FEED_NAME_LEN:
            return Result.Err(ErrorCode.INVALID_INPUT, f"Feed name is longer than {MAX_FEED_NAME_LEN} characters")

        folders_json = json.dumps(feed.folder_paths, ensure_ascii=False)
        config_json = json.dumps(feed.filter_config.to_dict(), ensure_ascii=False)

        if feed.id is not None:
            res = await self.db.aexecute(
                "UPDATE feeds SET name = ?, folder_paths = ?, filter_config = ? WHERE id = ?",
                (name, folders_json, config_json, int(feed.id)),
            )
            if not res.ok:
                return Result.Err(ErrorCode.UPDATE_FAILED, res.error or "Failed to update feed")
            if not res.meta.get("rowcount"):
                return Result.Err(ErrorCode.NOT_FOUND, f"Feed not found: {feed.id}")
            return Result.Ok(Feed(int(feed.id), name, list(feed.folder_paths), feed.filter_config), created=False)

        res = await self.db.aexecute(
            "INSERT INTO feeds (name, folder_paths, filter_config) VALUES (?, ?, ?)",
            (name, folders_json, config_json),
        )
        if not res.ok or not res.data:
            return Result.Err(ErrorCode.UPDATE_FAILED, res.error or "Failed to create feed")
        return Result.Ok(Feed(int(res.data), name, list(feed.folder_paths), feed.filter_config), created=True)

    async def delete_feed(self, feed_id: int) -> Result[bool]:
        res = await self.db.aexecute("DELETE FROM feeds WHERE id = ?", (int(feed_id),))
        if not res.ok:
            return Result.Err(ErrorCode.DB_ERROR, res.error or "Failed to delete feed")
        return Result.Ok(bool(res.meta.get("rowcount")))

    async def query_feed(self, feed_id: int, limit: int = 100, offset: int = 0) -> Result[List[MediaItem]]:
        """Run a feed's filters over its folders (no folders means the whole catalog)."""
        feed_res = await self.get_feed(feed_id)
        if not feed_res.ok:
            return Result.Err(feed_res.code, feed_res.error or "Failed to load feed")
        feed = feed_res.unwrap()
        return await self.searcher.query(feed.filter_config.scoped_to(feed.folder_paths), limit=limit, offset=offset)
