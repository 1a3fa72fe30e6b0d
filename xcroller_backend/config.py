"""
Configuration for Xcroller.

Every knob reads an `XCROLLER_*` environment variable once at import time.
"""
import logging
import os
from pathlib import Path

from .utils import env_bool

logger = logging.getLogger(__name__)


def _env_raw(*names: str, default: str | None = None) -> str | None:
    for name in names:
        if not name:
            continue
        val = os.getenv(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(default: int, *names: str, min_value: int | None = None, max_value: int | None = None) -> int:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_float(default: float, *names: str, min_value: float | None = None, max_value: float | None = None) -> float:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid float for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_bool(default: bool, *names: str) -> bool:
    for name in names:
        if name and name in os.environ:
            return env_bool(name, default)
    return default


# Storage
DATA_DIR = Path(_env_raw("XCROLLER_DATA_DIR", default=str(Path.home() / ".xcroller"))).expanduser()
INDEX_DB = str(Path(_env_raw("XCROLLER_DB_PATH", default=str(DATA_DIR / "xcroller.db"))).expanduser())

DB_TIMEOUT = _env_float(30.0, "XCROLLER_DB_TIMEOUT", min_value=1.0)
DB_MAX_CONNECTIONS = _env_int(8, "XCROLLER_DB_MAX_CONNECTIONS", min_value=1, max_value=64)
DB_QUERY_TIMEOUT = _env_float(60.0, "XCROLLER_DB_QUERY_TIMEOUT", min_value=1.0)
DB_LOCK_RETRIES = _env_int(5, "XCROLLER_DB_LOCK_RETRIES", min_value=0, max_value=50)

# Query
MEDIA_QUERY_MAX_LIMIT = _env_int(5000, "XCROLLER_MEDIA_QUERY_MAX_LIMIT", min_value=1)

# Scanning
SCAN_BATCH_SIZE = _env_int(200, "XCROLLER_SCAN_BATCH_SIZE", min_value=1, max_value=10000)
FS_WALK_MAX_WORKERS = _env_int(4, "XCROLLER_FS_WALK_MAX_WORKERS", min_value=1, max_value=64)
SCAN_IOPS_LIMIT = _env_float(0.0, "XCROLLER_SCAN_IOPS_LIMIT", min_value=0.0)
BACKFILL_ON_STARTUP = _env_bool(True, "XCROLLER_BACKFILL_ON_STARTUP")

# Export
EXPORT_MAX_WORKERS = _env_int(8, "XCROLLER_EXPORT_MAX_WORKERS", min_value=1, max_value=64)

# HTTP
SERVER_HOST = _env_raw("XCROLLER_SERVER_HOST", default="127.0.0.1")
SERVER_PORT = _env_int(8765, "XCROLLER_SERVER_PORT", min_value=1, max_value=65535)
MAX_JSON_BYTES = _env_int(1024 * 1024, "XCROLLER_MAX_JSON_BYTES", min_value=1024)


def initialize_directories(db_path: str | None = None) -> None:
    """Create the directory holding the index database if it is missing."""
    target = Path(db_path or INDEX_DB).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
