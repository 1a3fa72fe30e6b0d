"""
Query builder and read operations over the media catalog.

Filters are composed from typed predicate fragments whose values are bound
as parameters; no user-supplied text is interpolated into SQL.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from ...adapters.db.sqlite import Sqlite
from ...config import MEDIA_QUERY_MAX_LIMIT
from ...shared import ErrorCode, Result, get_logger
from ...utils import INT64_MAX
from .filters import FilterOptions, normalize_extension, normalize_sort_key, normalize_sort_order
from .models import MEDIA_COLUMNS, MediaItem

logger = get_logger(__name__)

_SORT_EXPRESSIONS = {
    "created_at": "created_at",
    "size_bytes": "size_bytes",
    "resolution": "(width * height)",
    "duration_sec": "duration_sec",
    "filename": "path",
}

_ORIENTATION_SQL = {
    "horizontal": "width > height",
    "vertical": "width < height",
    "square": "width = height",
}


@dataclass(frozen=True)
class Predicate:
    """One WHERE fragment with its bound values."""
    sql: str
    params: Tuple[Any, ...] = ()

    @staticmethod
    def any_of(parts: List["Predicate"]) -> Optional["Predicate"]:
        if not parts:
            return None
        sql = " OR ".join(p.sql for p in parts)
        params: Tuple[Any, ...] = tuple(v for p in parts for v in p.params)
        return Predicate(f"({sql})", params)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _favorites(f: FilterOptions) -> Optional[Predicate]:
    return Predicate("starred = 1") if f.favorites_only else None


def _folder_scope(f: FilterOptions) -> Optional[Predicate]:
    # Plain string prefix, case-sensitive; substr avoids LIKE wildcards in paths.
    return Predicate.any_of(
        [Predicate("substr(path, 1, ?) = ?", (len(folder), folder)) for folder in f.folder_paths if folder]
    )


def _media_kind(f: FilterOptions) -> Optional[Predicate]:
    if not f.media_type or f.media_type == "all":
        return None
    return Predicate("file_type = ?", (f.media_type,))


def _orientation(f: FilterOptions) -> Optional[Predicate]:
    sql = _ORIENTATION_SQL.get(f.orientation or "")
    return Predicate(sql) if sql else None


def _dimensions(f: FilterOptions) -> List[Predicate]:
    out = []
    if f.min_width is not None:
        out.append(Predicate("width >= ?", (f.min_width,)))
    if f.min_height is not None:
        out.append(Predicate("height >= ?", (f.min_height,)))
    return out


def _duration(f: FilterOptions) -> List[Predicate]:
    # Unknown duration satisfies both bounds; non-positive bounds are ignored.
    out = []
    if f.min_duration is not None and f.min_duration > 0:
        out.append(Predicate("(duration_sec >= ? OR duration_sec IS NULL)", (f.min_duration,)))
    if f.max_duration is not None and f.max_duration > 0:
        out.append(Predicate("(duration_sec <= ? OR duration_sec IS NULL)", (f.max_duration,)))
    return out


def _size(f: FilterOptions) -> List[Predicate]:
    out = []
    if f.min_size is not None:
        out.append(Predicate("size_bytes >= ?", (f.min_size,)))
    if f.max_size is not None:
        out.append(Predicate("size_bytes <= ?", (f.max_size,)))
    return out


def _extensions(f: FilterOptions) -> Optional[Predicate]:
    exts = [e for e in (normalize_extension(x) for x in f.extensions) if e]
    return Predicate.any_of(
        [Predicate("LOWER(path) LIKE ? ESCAPE '\\'", (f"%.{_escape_like(ext)}",)) for ext in exts]
    )


_PREDICATE_BUILDERS: Tuple[Callable[[FilterOptions], Any], ...] = (
    _favorites,
    _folder_scope,
    _media_kind,
    _orientation,
    _dimensions,
    _duration,
    _size,
    _extensions,
)


def build_predicates(filters: FilterOptions) -> List[Predicate]:
    predicates: List[Predicate] = []
    for builder in _PREDICATE_BUILDERS:
        produced = builder(filters)
        if produced is None:
            continue
        if isinstance(produced, Predicate):
            predicates.append(produced)
        else:
            predicates.extend(produced)
    return predicates


def build_order_by(filters: FilterOptions) -> str:
    key = normalize_sort_key(filters.sort_by)
    if key == "random":
        return "ORDER BY RANDOM()"
    direction = "ASC" if normalize_sort_order(filters.sort_order) == "asc" else "DESC"
    return f"ORDER BY {_SORT_EXPRESSIONS[key]} {direction}, id {direction}"


def clamp_page(limit: Any, offset: Any) -> Tuple[int, int]:
    try:
        lim = int(limit)
    except (TypeError, ValueError):
        lim = MEDIA_QUERY_MAX_LIMIT
    try:
        off = int(offset)
    except (TypeError, ValueError):
        off = 0
    return max(0, min(lim, MEDIA_QUERY_MAX_LIMIT)), max(0, min(off, INT64_MAX))


def build_media_query(filters: FilterOptions, limit: int, offset: int) -> Tuple[str, Tuple[Any, ...]]:
    """Compose the SELECT statement and its parameters for one page of results."""
    predicates = build_predicates(filters)
    where = ""
    params: List[Any] = []
    if predicates:
        where = "WHERE " + " AND ".join(p.sql for p in predicates)
        for p in predicates:
            params.extend(p.params)
    lim, off = clamp_page(limit, offset)
    sql = f"SELECT {MEDIA_COLUMNS} FROM media_items {where} {build_order_by(filters)} LIMIT ? OFFSET ?"
    params.extend([lim, off])
    return sql, tuple(params)


class IndexSearcher:
    """Read side of the catalog."""

    def __init__(self, db: Sqlite):
        self.db = db

    async def query(
        self,
        filters: Optional[FilterOptions] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Result[List[MediaItem]]:
        """
        Return one page of media items matching `filters`.

        Args:
            filters: Constraints and sort order (None means everything, newest first)
            limit: Page size, clamped to MEDIA_QUERY_MAX_LIMIT
            offset: Rows to skip

        Returns:
            Result with the ordered page
        """
        filters = filters or FilterOptions()
        sql, params = build_media_query(filters, limit, offset)
        res = await self.db.aquery(sql, params)
        if not res.ok:
            return Result.Err(ErrorCode.QUERY_FAILED, res.error or "Media query failed")
        items = [MediaItem.from_row(row) for row in res.data or []]
        lim, off = clamp_page(limit, offset)
        return Result.Ok(items, limit=lim, offset=off, count=len(items))

    async def get_media(self, media_id: int) -> Result[MediaItem]:
        res = await self.db.aquery(f"SELECT {MEDIA_COLUMNS} FROM media_items WHERE id = ?", (int(media_id),))
        if not res.ok:
            return Result.Err(ErrorCode.DB_ERROR, res.error or "Failed to load media item")
        if not res.data:
            return Result.Err(ErrorCode.NOT_FOUND, f"Media item not found: {media_id}")
        return Result.Ok(MediaItem.from_row(res.data[0]))

    async def starred_paths(self) -> Result[List[str]]:
        res = await self.db.aquery("SELECT path FROM media_items WHERE starred = 1 ORDER BY id")
        if not res.ok:
            return Result.Err(ErrorCode.DB_ERROR, res.error or "Failed to list starred items")
        return Result.Ok([str(row["path"]) for row in res.data or []])
