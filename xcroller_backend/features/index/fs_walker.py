"""
FileSystemWalker: directory traversal for scans.

The walker runs on a thread-pool executor and pushes discovered file paths into a
thread-safe Queue consumed by the async scan loop.
"""
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from queue import Empty, Queue
from typing import Iterator

from ...config import FS_WALK_MAX_WORKERS
from ...shared import get_logger, is_supported_extension

logger = get_logger(__name__)

# Each scan has its own producer/queue; independent scans may walk in parallel.
FS_WALK_EXECUTOR = ThreadPoolExecutor(max_workers=FS_WALK_MAX_WORKERS, thread_name_prefix="xcroller-fs-walk")


class FileSystemWalker:
    """
    Walks a directory tree, yielding supported media files.

    Entries that cannot be read (permission denied, broken links) are skipped.
    Symlinked files are indexed but symlinked directories are not descended.
    """

    def __init__(self, scan_iops_limit: float = 0.0) -> None:
        self._scan_iops_limit = max(0.0, float(scan_iops_limit or 0.0))
        self._scan_iops_next_ts = 0.0

    def _scan_iops_wait(self) -> None:
        """Pace directory entry processing to at most `scan_iops_limit` per second."""
        limit = self._scan_iops_limit
        if limit <= 0.0:
            return
        now = time.perf_counter()
        next_ts = self._scan_iops_next_ts
        if next_ts > now:
            time.sleep(next_ts - now)
            now = time.perf_counter()
        self._scan_iops_next_ts = max(next_ts, now) + 1.0 / limit

    def iter_files(self, directory: Path, recursive: bool) -> Iterator[Path]:
        """
        Iterate over supported media files under `directory`.

        Args:
            directory: Directory to scan
            recursive: Descend into subdirectories; otherwise immediate children only

        Yields:
            File paths one by one
        """
        stack: list[Path] = [directory]
        while stack:
            current = stack.pop()
            try:
                with os.scandir(current) as it:
                    for entry in it:
                        self._scan_iops_wait()
                        if recursive:
                            next_dir = self._next_dir(entry)
                            if next_dir is not None:
                                stack.append(next_dir)
                                continue
                        file_path = self._candidate(entry)
                        if file_path is not None:
                            yield file_path
            except OSError as exc:
                logger.debug("Skipping unreadable directory %s: %s", current, exc)
                continue

    @staticmethod
    def _next_dir(entry: os.DirEntry) -> Path | None:
        try:
            if entry.is_dir(follow_symlinks=False):
                return Path(entry.path)
        except OSError:
            return None
        return None

    def _candidate(self, entry: os.DirEntry) -> Path | None:
        if not is_supported_extension(entry.name):
            return None
        try:
            if not entry.is_file(follow_symlinks=True):
                return None
        except OSError:
            return None
        return Path(entry.path)

    def walk_and_enqueue(
        self,
        dir_path: Path,
        recursive: bool,
        stop_event: threading.Event,
        q: "Queue[Path | None]",
    ) -> None:
        """Producer running on the executor: walks the tree and pushes paths, then a None sentinel."""
        try:
            for fp in self.iter_files(dir_path, recursive):
                if stop_event.is_set():
                    break
                q.put(fp)
        except OSError:
            logger.debug("Filesystem walk failed for %s", dir_path, exc_info=True)
        finally:
            q.put(None)

    @staticmethod
    def drain_queue(q: "Queue[Path | None]", max_items: int) -> list[Path | None]:
        """Block for one item, then take up to `max_items` total without blocking."""
        items: list[Path | None] = [q.get()]
        limit = max(1, int(max_items or 1))
        while len(items) < limit:
            try:
                items.append(q.get_nowait())
            except Empty:
                break
        return items

    @staticmethod
    def discard_pending(q: "Queue[Path | None]") -> int:
        """Drop everything currently queued without blocking."""
        dropped = 0
        while True:
            try:
                q.get_nowait()
            except Empty:
                return dropped
            dropped += 1
