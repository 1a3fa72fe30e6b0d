"""
Route registration: collects every handler into one RouteTableDef.
"""

from __future__ import annotations

from aiohttp import web

from xcroller_backend.observability import request_context_middleware
from xcroller_backend.shared import get_logger

from .handlers import (
    register_favorites_routes,
    register_feed_routes,
    register_folder_routes,
    register_media_routes,
    register_scan_routes,
)

logger = get_logger(__name__)

API_PREFIX = "/xcroller/"


def build_route_table() -> web.RouteTableDef:
    routes = web.RouteTableDef()
    register_scan_routes(routes)
    register_folder_routes(routes)
    register_media_routes(routes)
    register_favorites_routes(routes)
    register_feed_routes(routes)
    return routes


def register_all_routes(app: web.Application) -> web.RouteTableDef:
    """Install the request-context middleware and every API route on `app`."""
    if request_context_middleware not in app.middlewares:
        app.middlewares.append(request_context_middleware)
    routes = build_route_table()
    app.add_routes(routes)
    logger.debug("Registered %d routes under %s", len(list(routes)), API_PREFIX)
    return routes
