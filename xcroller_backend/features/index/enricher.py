"""
Backfill worker: re-probes catalog rows whose metadata is still unknown.
"""
from __future__ import annotations

import asyncio
import os
from typing import Callable, Dict, Optional

from ...adapters.db.sqlite import Sqlite
from ...shared import get_logger, log_success, timer
from ..metadata import Metadata, probe
from .index_db_ops import fill_media_metadata, list_missing_metadata

logger = get_logger(__name__)


class BackfillWorker:
    """
    Best-effort metadata healing pass.

    Rows whose file is gone are skipped; rows that still cannot be probed stay
    unresolved until a later pass or scan. Nothing here surfaces an error.
    """

    def __init__(self, db: Sqlite, prober: Callable[[str, str], Metadata] = probe):
        self.db = db
        self._probe = prober
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> Dict[str, int]:
        """Run one pass over all rows missing metadata and return counters."""
        stats = {"candidates": 0, "missing": 0, "updated": 0, "unresolved": 0}
        with timer("metadata backfill", logger):
            res = await list_missing_metadata(self.db)
            if not res.ok:
                logger.warning("Backfill skipped, catalog unavailable: %s", res.error)
                return stats
            rows = res.data or []
            stats["candidates"] = len(rows)
            for row in rows:
                await self._heal_row(row, stats)
        if stats["updated"]:
            log_success(logger, f"Backfilled metadata for {stats['updated']} media items")
        return stats

    async def _heal_row(self, row: dict, stats: Dict[str, int]) -> None:
        path = str(row.get("path") or "")
        kind = str(row.get("file_type") or "")
        if not await asyncio.to_thread(os.path.isfile, path):
            stats["missing"] += 1
            return
        meta = await asyncio.to_thread(self._probe, path, kind)
        if meta.empty:
            stats["unresolved"] += 1
            return
        res = await fill_media_metadata(
            self.db,
            int(row["id"]),
            width=meta.width,
            height=meta.height,
            duration=meta.duration,
        )
        if res.ok:
            stats["updated"] += 1
        else:
            stats["unresolved"] += 1
            logger.debug("Backfill update failed for id=%s: %s", row.get("id"), res.error)

    def start(self) -> asyncio.Task:
        """Schedule one pass as a background task owned by this worker."""
        if self.running:
            return self._task
        self._task = asyncio.create_task(self.run_once(), name="xcroller-backfill")
        return self._task

    async def stop(self) -> None:
        """Cancel the background pass (if any) and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
