"""
Index Service - scanning, querying and favorites over the media catalog.

This service coordinates the specialized components:
- IndexScanner: directory scanning and upserts
- IndexSearcher: filtered, sorted, paginated reads
- MediaUpdater: star toggling and manual dimension edits
- BackfillWorker: background healing of missing metadata
"""
from typing import Any, Dict, List, Optional

from ...adapters.db.sqlite import Sqlite
from ...shared import Result, get_logger
from ..folders import FolderRegistry
from .enricher import BackfillWorker
from .filters import FilterOptions
from .models import MediaItem
from .scanner import IndexScanner
from .searcher import IndexSearcher
from .updater import MediaUpdater

logger = get_logger(__name__)


class IndexService:
    """Entry point for catalog operations used by routes and other features."""

    def __init__(self, db: Sqlite, folders: FolderRegistry):
        self.db = db
        self.folders = folders
        self._scanner = IndexScanner(db, folders)
        self.searcher = IndexSearcher(db)
        self._updater = MediaUpdater(db)
        self.backfill = BackfillWorker(db)

    # ==================== Scanning ====================

    async def scan_directory(self, directory: str, recursive: bool = True) -> Result[int]:
        """Scan a folder; the result holds the visited-file count."""
        return await self._scanner.scan_directory(directory, recursive=recursive)

    # ==================== Reads ====================

    async def query(
        self,
        filters: Optional[FilterOptions] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[List[MediaItem]]:
        return await self.searcher.query(filters, limit=limit, offset=offset)

    async def get_media(self, media_id: int) -> Result[MediaItem]:
        return await self.searcher.get_media(media_id)

    async def starred_paths(self) -> Result[List[str]]:
        return await self.searcher.starred_paths()

    # ==================== Updates ====================

    async def toggle_star(self, media_id: int) -> Result[bool]:
        return await self._updater.toggle_star(media_id)

    async def clear_favorites(self) -> Result[int]:
        return await self._updater.clear_favorites()

    async def update_dimensions(self, media_id: int, width: int, height: int) -> Result[Dict[str, Any]]:
        return await self._updater.update_dimensions(media_id, width, height)

    # ==================== Backfill ====================

    async def run_backfill(self) -> Dict[str, int]:
        return await self.backfill.run_once()

    def start_backfill(self):
        return self.backfill.start()

    async def stop_backfill(self) -> None:
        await self.backfill.stop()
