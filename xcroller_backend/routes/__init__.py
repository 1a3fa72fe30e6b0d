"""
HTTP command surface (aiohttp).
"""
from .core import SERVICES_ERROR_KEY, SERVICES_KEY
from .registry import build_route_table, register_all_routes

__all__ = ["SERVICES_KEY", "SERVICES_ERROR_KEY", "build_route_table", "register_all_routes"]
