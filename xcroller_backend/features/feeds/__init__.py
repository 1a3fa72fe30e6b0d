"""Saved feeds (named queries)."""
from .service import Feed, FeedService

__all__ = ["Feed", "FeedService"]
