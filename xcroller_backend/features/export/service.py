"""
Export service - copies starred media into a destination folder.
"""
from __future__ import annotations

import asyncio
import os
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List

from ...config import EXPORT_MAX_WORKERS
from ...path_utils import has_null_byte, normalize_path
from ...shared import ErrorCode, Result, get_logger, log_success, sanitize_error_message
from ..index.searcher import IndexSearcher

logger = get_logger(__name__)


def _copy_group(srcs: List[str], destination: Path) -> Dict[str, int]:
    """Copy sources that share one base name, in order; the last copy wins."""
    stats = {"copied": 0, "failed": 0}
    for src in srcs:
        try:
            shutil.copy2(src, destination / os.path.basename(src))
            stats["copied"] += 1
        except (OSError, shutil.Error) as exc:
            stats["failed"] += 1
            logger.warning("Failed to export %s: %s", src, exc)
    return stats


def copy_files(paths: List[str], destination: Path, max_workers: int = EXPORT_MAX_WORKERS) -> Dict[str, int]:
    """
    Copy files into `destination` by base name, overwriting existing files.

    Distinct names are copied in parallel. Paths sharing a base name go to
    one worker and are copied in list order, so the last one wins.
    Individual copy failures are logged and counted, never raised.
    """
    stats = {"copied": 0, "failed": 0}
    if not paths:
        return stats
    groups: Dict[str, List[str]] = {}
    for path in paths:
        groups.setdefault(os.path.basename(path), []).append(path)
    workers = max(1, min(int(max_workers), len(groups)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="xcroller-export") as executor:
        futures = [executor.submit(_copy_group, srcs, destination) for srcs in groups.values()]
        for future in as_completed(futures):
            for key, value in future.result().items():
                stats[key] += value
    return stats


class ExportService:
    def __init__(self, searcher: IndexSearcher, max_workers: int = EXPORT_MAX_WORKERS):
        self.searcher = searcher
        self._max_workers = max_workers

    async def export_starred(self, destination: str) -> Result[int]:
        """
        Copy every starred file into `destination`.

        Returns:
            Result with the number of starred items found (not the number
            copied); `copied` and `failed` are reported in meta
        """
        if has_null_byte(destination):
            return Result.Err(ErrorCode.INVALID_INPUT, "Invalid destination path")
        target = normalize_path(destination)
        if not target:
            return Result.Err(ErrorCode.INVALID_INPUT, "Missing destination path")

        paths_res = await self.searcher.starred_paths()
        if not paths_res.ok:
            return Result.Err(ErrorCode.EXPORT_FAILED, paths_res.error or "Failed to list starred items")
        paths = paths_res.unwrap()
        if not paths:
            return Result.Ok(0, copied=0, failed=0)

        dest = Path(target)
        try:
            await asyncio.to_thread(dest.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Cannot create export destination %s: %s", dest, exc)
            return Result.Err(ErrorCode.INVALID_INPUT, sanitize_error_message(exc, "Cannot create destination"))

        stats = await asyncio.to_thread(copy_files, paths, dest, self._max_workers)
        log_success(logger, f"Exported {stats['copied']}/{len(paths)} starred items to {dest}")
        return Result.Ok(len(paths), **stats)
