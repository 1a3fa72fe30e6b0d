"""
Index scanner: walks a folder and registers every supported media file.
"""
from __future__ import annotations

import asyncio
import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from queue import Queue
from typing import Any, Callable, List, Optional
from uuid import uuid4

from ...adapters.db.sqlite import Sqlite
from ...config import SCAN_BATCH_SIZE, SCAN_IOPS_LIMIT
from ...path_utils import canonical_path, has_null_byte
from ...shared import ErrorCode, Result, classify_file, get_logger, log_structured, ms
from ..folders import FolderRegistry
from ..metadata import Metadata, probe
from .fs_walker import FS_WALK_EXECUTOR, FileSystemWalker
from .index_db_ops import MediaRow, upsert_media_rows

logger = get_logger(__name__)


def _created_at(st: os.stat_result) -> int:
    # st_birthtime is missing on most Linux filesystems; fall back to mtime.
    created = getattr(st, "st_birthtime", None)
    if created is None:
        created = st.st_mtime
    return max(0, int(created))


@dataclass
class ScanJob:
    """State of one scan call. Each call owns its own job."""
    folder: str
    recursive: bool
    scan_id: str = field(default_factory=lambda: str(uuid4()))
    stats: dict = field(default_factory=lambda: {"visited": 0, "written": 0})

    @property
    def root(self) -> Path:
        return Path(self.folder)

    def media_path(self, file_path: Path) -> str:
        """Catalog key of a walked file: the folder key plus the relative part."""
        rel = file_path.relative_to(self.root).as_posix()
        return f"{self.folder.rstrip('/')}/{rel}"


class IndexScanner:
    """
    Scans folders into the catalog.

    The directory walk runs on a thread-pool executor; stat and probing run
    in worker threads batch by batch, so the event loop stays responsive.
    """

    def __init__(
        self,
        db: Sqlite,
        folders: FolderRegistry,
        *,
        batch_size: int = SCAN_BATCH_SIZE,
        scan_iops_limit: float = SCAN_IOPS_LIMIT,
        prober: Callable[[str, str], Metadata] = probe,
    ):
        self.db = db
        self.folders = folders
        self._batch_size = max(1, int(batch_size))
        self._fs_walker = FileSystemWalker(scan_iops_limit)
        self._probe = prober

    @staticmethod
    def _log_scan_event(job: ScanJob, level: int, message: str, **context: Any) -> None:
        context.setdefault("scan_id", job.scan_id)
        log_structured(logger, level, message, directory=job.folder, **context)

    async def scan_directory(self, directory: str, recursive: bool = True) -> Result[int]:
        """
        Scan a folder and upsert every supported file into the catalog.

        Args:
            directory: Folder to scan (made absolute and normalized before use)
            recursive: Descend into subfolders; otherwise immediate children only

        Returns:
            Result with the number of supported files visited, including ones
            already present in the catalog
        """
        if has_null_byte(directory):
            return Result.Err(ErrorCode.INVALID_INPUT, "Invalid folder path")
        folder = canonical_path(directory)
        if not folder:
            return Result.Err(ErrorCode.INVALID_INPUT, "Missing folder path")
        if not await asyncio.to_thread(os.path.isdir, folder):
            return Result.Err(ErrorCode.INVALID_INPUT, f"Not a directory: {folder}")

        reg = await self.folders.add(folder)
        if not reg.ok:
            return Result.Err(reg.code, reg.error or "Failed to register folder")

        job = ScanJob(folder=folder, recursive=bool(recursive))
        started = ms()
        self._log_scan_event(job, logging.INFO, "Starting directory scan", recursive=job.recursive)
        try:
            err = await self._run_streaming_loop(job)
        finally:
            duration_ms = ms() - started
            self._log_scan_event(job, logging.INFO, "Directory scan finished", duration_ms=duration_ms, **job.stats)
        if err is not None:
            return err
        return Result.Ok(job.stats["visited"], written=job.stats["written"], duration_ms=duration_ms)

    async def _run_streaming_loop(self, job: ScanJob) -> Optional[Result[int]]:
        loop = asyncio.get_running_loop()
        stop_event = threading.Event()
        q: "Queue[Path | None]" = Queue(maxsize=self._batch_size * 4)
        walk_future = loop.run_in_executor(
            FS_WALK_EXECUTOR,
            self._fs_walker.walk_and_enqueue,
            job.root,
            job.recursive,
            stop_event,
            q,
        )
        try:
            return await self._consume_queue(q, job)
        finally:
            stop_event.set()
            # Unblock a producer waiting on a full queue.
            while not walk_future.done():
                self._fs_walker.discard_pending(q)
                await asyncio.sleep(0.01)
            await walk_future

    async def _consume_queue(self, q: "Queue[Path | None]", job: ScanJob) -> Optional[Result[int]]:
        batch: List[Path] = []
        done = False
        while not done:
            pulled = await asyncio.to_thread(self._fs_walker.drain_queue, q, self._batch_size)
            for file_path in pulled:
                if file_path is None:
                    done = True
                    break
                batch.append(file_path)
                job.stats["visited"] += 1
            if len(batch) >= self._batch_size or (done and batch):
                err = await self._process_batch(batch, job)
                batch = []
                if err is not None:
                    return err
        return None

    async def _process_batch(self, batch: List[Path], job: ScanJob) -> Optional[Result[int]]:
        rows = await asyncio.to_thread(self._prepare_rows, batch, job)
        res = await upsert_media_rows(self.db, rows)
        if not res.ok:
            self._log_scan_event(job, logging.ERROR, "Failed to write scan batch", error=res.error, size=len(rows))
            return Result.Err(ErrorCode.SCAN_FAILED, res.error or "Failed to write scan batch")
        job.stats["written"] += int(res.data or 0)
        return None

    def _prepare_rows(self, batch: List[Path], job: ScanJob) -> List[MediaRow]:
        return [self._build_row(fp, job) for fp in batch]

    def _build_row(self, file_path: Path, job: ScanJob) -> MediaRow:
        """Stat and probe one file. Runs in a worker thread."""
        path_str = job.media_path(file_path)
        kind = classify_file(path_str)
        try:
            st = file_path.stat()
            size, created = int(st.st_size), _created_at(st)
        except OSError as exc:
            logger.debug("Stat failed for %s: %s", file_path, exc)
            size, created = 0, 0
        meta = self._probe(str(file_path), kind)
        return (path_str, kind, size, created, meta.width, meta.height, meta.duration)
