"""
Scan endpoint.
"""
from aiohttp import web

from ..core import _json_response, _parse_flag, _read_json, _require_services
from xcroller_backend.shared import ErrorCode, Result


def register_scan_routes(routes: web.RouteTableDef) -> None:
    @routes.post("/xcroller/scan")
    async def scan_folder(request):
        """
        Register a folder and scan it into the catalog.

        Body: {"path": str, "recursive": bool = true}
        """
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)

        body_res = await _read_json(request)
        if not body_res.ok:
            return _json_response(body_res)
        body = body_res.data or {}

        path = body.get("path")
        if not isinstance(path, str) or not path.strip():
            return _json_response(Result.Err(ErrorCode.INVALID_INPUT, "Missing 'path'"))

        result = await svc["index"].scan_directory(path, recursive=_parse_flag(body, "recursive", True))
        return _json_response(result)
