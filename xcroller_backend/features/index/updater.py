"""
Media updater: user-driven mutations (favorites and manual dimensions).
"""
from __future__ import annotations

from typing import Any, Dict

from ...adapters.db.sqlite import Sqlite
from ...shared import ErrorCode, Result


class MediaUpdater:
    """
    Single-statement updates against `media_items`.

    Each method is one atomic statement, so no explicit transaction is needed.
    """

    def __init__(self, db: Sqlite):
        self.db = db

    async def toggle_star(self, media_id: int) -> Result[bool]:
        """
        Flip the starred flag of one item.

        Args:
            media_id: Media item id

        Returns:
            Result with the new starred state, NOT_FOUND for an unknown id
        """
        res = await self.db.aexecute(
            "UPDATE media_items SET starred = NOT starred WHERE id = ? RETURNING starred",
            (int(media_id),),
            fetch=True,
        )
        if not res.ok:
            return Result.Err(ErrorCode.UPDATE_FAILED, res.error or "Failed to toggle star")
        if not res.data:
            return Result.Err(ErrorCode.NOT_FOUND, f"Media item not found: {media_id}")
        return Result.Ok(bool(res.data[0]["starred"]))

    async def clear_favorites(self) -> Result[int]:
        """Unstar every item. Returns the number of rows that were starred."""
        res = await self.db.aexecute("UPDATE media_items SET starred = 0 WHERE starred = 1")
        if not res.ok:
            return Result.Err(ErrorCode.UPDATE_FAILED, res.error or "Failed to clear favorites")
        return Result.Ok(int(res.meta.get("rowcount") or 0))

    async def update_dimensions(self, media_id: int, width: int, height: int) -> Result[Dict[str, Any]]:
        """Overwrite width and height of one item (both are set together)."""
        if width is None or height is None or int(width) < 0 or int(height) < 0:
            return Result.Err(ErrorCode.INVALID_INPUT, "width and height must be non-negative integers")
        res = await self.db.aexecute(
            "UPDATE media_items SET width = ?, height = ? WHERE id = ?",
            (int(width), int(height), int(media_id)),
        )
        if not res.ok:
            return Result.Err(ErrorCode.UPDATE_FAILED, res.error or "Failed to update dimensions")
        if not res.meta.get("rowcount"):
            return Result.Err(ErrorCode.NOT_FOUND, f"Media item not found: {media_id}")
        return Result.Ok({"id": int(media_id), "width": int(width), "height": int(height)})
