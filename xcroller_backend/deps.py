"""
Dependency injection - builds services.
Simple, debug-friendly DI without framework magic.
"""

from .adapters.db.schema import init_schema
from .adapters.db.sqlite import Sqlite
from .config import (
    BACKFILL_ON_STARTUP,
    DB_MAX_CONNECTIONS,
    DB_TIMEOUT,
    INDEX_DB,
    initialize_directories,
)
from .features.export import ExportService
from .features.feeds import FeedService
from .features.folders import FolderRegistry
from .features.index import IndexService
from .shared import ErrorCode, Result, get_logger, log_success

logger = get_logger(__name__)


def _resolve_db_path(db_path: str | None) -> str:
    return db_path if db_path is not None else INDEX_DB


def _init_db_or_error(db_path: str) -> Result[Sqlite]:
    logger.info("Opening catalog: %s", db_path)
    try:
        initialize_directories(db_path)
    except OSError as exc:
        logger.error("Failed to create data directory: %s", exc)
        return Result.Err(ErrorCode.DB_ERROR, f"Failed to create data directory: {exc}")
    return Result.Ok(Sqlite(db_path, max_connections=DB_MAX_CONNECTIONS, timeout=DB_TIMEOUT))


async def build_services(db_path: str | None = None, *, start_backfill: bool = BACKFILL_ON_STARTUP) -> Result[dict]:
    """
    Build all services (DI container).

    Args:
        db_path: Path to the SQLite catalog (default: config.INDEX_DB)
        start_backfill: Launch the metadata backfill pass as a background task

    Returns:
        Result[dict] of service instances
    """
    db_res = _init_db_or_error(_resolve_db_path(db_path))
    if not db_res.ok:
        return Result.Err(db_res.code, db_res.error or "Failed to open catalog")
    db = db_res.unwrap()

    schema_res = await init_schema(db)
    if not schema_res.ok:
        await db.aclose()
        return Result.Err(schema_res.code, f"Failed to initialize catalog: {schema_res.error}")

    folders = FolderRegistry(db)
    index_service = IndexService(db, folders)
    services = {
        "db": db,
        "folders": folders,
        "index": index_service,
        "feeds": FeedService(db, index_service.searcher),
        "export": ExportService(index_service.searcher),
    }

    if start_backfill:
        index_service.start_backfill()

    log_success(logger, "All services initialized")
    return Result.Ok(services)


async def dispose_services(services: dict | None) -> None:
    """Stop background work, then close the catalog."""
    if not services:
        return
    index_service = services.get("index")
    if index_service is not None:
        await index_service.stop_backfill()
    db = services.get("db")
    if db is not None:
        await db.aclose()
    logger.info("Services disposed")
