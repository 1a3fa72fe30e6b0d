"""
Folder registry: the set of root folders the catalog was built from.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping

from ...adapters.db.sqlite import Sqlite
from ...path_utils import canonical_path
from ...shared import ErrorCode, Result, get_logger

logger = get_logger(__name__)


@dataclass
class Folder:
    id: int
    path: str
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Folder":
        return cls(id=int(row["id"]), path=str(row["path"]), is_active=bool(row.get("is_active", 1)))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FolderRegistry:
    """Thin wrapper over the `folders` table. Paths are stored normalized."""

    def __init__(self, db: Sqlite):
        self.db = db

    async def list_folders(self) -> Result[List[Folder]]:
        res = await self.db.aquery("SELECT id, path, is_active FROM folders ORDER BY id")
        if not res.ok:
            return Result.Err(ErrorCode.DB_ERROR, res.error or "Failed to list folders")
        return Result.Ok([Folder.from_row(row) for row in res.data or []])

    async def active_paths(self) -> Result[List[str]]:
        """Normalized paths of active folders, e.g. to restore access grants at start-up."""
        res = await self.db.aquery("SELECT path FROM folders WHERE is_active = 1 ORDER BY id")
        if not res.ok:
            return Result.Err(ErrorCode.DB_ERROR, res.error or "Failed to list active folders")
        return Result.Ok([str(row["path"]) for row in res.data or []])

    async def add(self, path: str) -> Result[str]:
        """Register a folder. Adding a known path is a no-op."""
        normalized = canonical_path(path)
        if not normalized:
            return Result.Err(ErrorCode.INVALID_INPUT, "Missing folder path")
        res = await self.db.aexecute("INSERT OR IGNORE INTO folders (path) VALUES (?)", (normalized,))
        if not res.ok:
            return Result.Err(ErrorCode.DB_ERROR, res.error or "Failed to add folder")
        return Result.Ok(normalized, added=bool(res.meta.get("rowcount")))

    async def remove(self, path: str) -> Result[Dict[str, Any]]:
        """
        Unregister a folder and delete every media row at or under it.

        Matching is a plain string prefix on the normalized path, so removing
        `/a/b` also drops rows under a sibling such as `/a/bc`.
        """
        normalized = canonical_path(path)
        if not normalized:
            return Result.Err(ErrorCode.INVALID_INPUT, "Missing folder path")

        folder_res = await self.db.aexecute("DELETE FROM folders WHERE path = ?", (normalized,))
        if not folder_res.ok:
            return Result.Err(ErrorCode.DB_ERROR, folder_res.error or "Failed to remove folder")

        media_res = await self.db.aexecute(
            "DELETE FROM media_items WHERE substr(path, 1, ?) = ? OR path = ?",
            (len(normalized), normalized, normalized),
        )
        if not media_res.ok:
            return Result.Err(ErrorCode.DB_ERROR, media_res.error or "Failed to remove folder media")

        removed = int(media_res.meta.get("rowcount") or 0)
        logger.info("Removed folder %s (%d media items)", normalized, removed)
        return Result.Ok({"path": normalized, "removed_media": removed})
