"""
Core utilities for route handlers.
"""
from .request_json import _read_json
from .response import _json_response
from .params import _parse_flag, _parse_id, _parse_page
from .services import SERVICES_ERROR_KEY, SERVICES_KEY, _require_services

__all__ = [
    "_json_response",
    "_read_json",
    "_require_services",
    "_parse_id",
    "_parse_page",
    "_parse_flag",
    "SERVICES_KEY",
    "SERVICES_ERROR_KEY",
]
