"""SQLite adapter and catalog schema."""
from .schema import init_schema
from .sqlite import Sqlite

__all__ = ["Sqlite", "init_schema"]
