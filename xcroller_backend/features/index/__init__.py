"""
Index feature - scanning, querying and metadata backfill.
"""
from .enricher import BackfillWorker
from .filters import FilterOptions
from .models import MediaItem
from .scanner import IndexScanner
from .searcher import IndexSearcher
from .service import IndexService

__all__ = [
    "BackfillWorker",
    "FilterOptions",
    "IndexScanner",
    "IndexSearcher",
    "IndexService",
    "MediaItem",
]
