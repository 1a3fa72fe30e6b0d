"""
Favorites endpoints: clear all stars, export starred files.
"""
from aiohttp import web

from ..core import _json_response, _read_json, _require_services
from xcroller_backend.shared import ErrorCode, Result


def register_favorites_routes(routes: web.RouteTableDef) -> None:
    @routes.post("/xcroller/favorites/clear")
    async def clear_favorites(request):
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        return _json_response(await svc["index"].clear_favorites())

    @routes.post("/xcroller/favorites/export")
    async def export_favorites(request):
        """
        Copy starred files into a folder.

        Body: {"destination": str}. `data` is the starred count; copy
        successes and failures are in `meta`.
        """
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)

        body_res = await _read_json(request)
        if not body_res.ok:
            return _json_response(body_res)
        destination = (body_res.data or {}).get("destination")
        if not isinstance(destination, str) or not destination.strip():
            return _json_response(Result.Err(ErrorCode.INVALID_INPUT, "Missing 'destination'"))

        return _json_response(await svc["export"].export_starred(destination))
