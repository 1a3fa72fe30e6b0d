"""
Time utilities for timestamps and performance measurement.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager


def ms() -> int:
    """Get current timestamp in milliseconds (int)."""
    return int(time.time() * 1000)


@contextmanager
def timer(label: str, logger: logging.Logger) -> Iterator[None]:
    """
    Log how long the wrapped block took, at DEBUG level.

    Usage:
        with timer("backfill pass", logger):
            await worker.run_once()
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s took %.3fs", label, time.perf_counter() - start)
