"""Favorites export."""
from .service import ExportService

__all__ = ["ExportService"]
