"""
Route handlers.
"""
from .favorites import register_favorites_routes
from .feeds import register_feed_routes
from .folders import register_folder_routes
from .media import register_media_routes
from .scan import register_scan_routes

__all__ = [
    "register_favorites_routes",
    "register_feed_routes",
    "register_folder_routes",
    "register_media_routes",
    "register_scan_routes",
]
