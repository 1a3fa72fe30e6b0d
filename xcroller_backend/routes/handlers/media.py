"""
Media query and per-item endpoints.
"""
from aiohttp import web

from ..core import _json_response, _parse_id, _parse_page, _read_json, _require_services
from xcroller_backend.features.index import FilterOptions
from xcroller_backend.shared import ErrorCode, Result
from xcroller_backend.utils import parse_int


def register_media_routes(routes: web.RouteTableDef) -> None:
    @routes.post("/xcroller/media")
    async def query_media(request):
        """
        Filtered, sorted, paginated media listing.

        Body: {"limit": int, "offset": int, "filters": FilterOptions}
        """
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)

        body_res = await _read_json(request)
        if not body_res.ok:
            return _json_response(body_res)
        body = body_res.data or {}

        filters = body.get("filters")
        if filters is not None and not isinstance(filters, dict):
            return _json_response(Result.Err(ErrorCode.INVALID_INPUT, "'filters' must be an object"))
        limit, offset = _parse_page(body)
        result = await svc["index"].query(FilterOptions.from_dict(filters or {}), limit=limit, offset=offset)
        return _json_response(result)

    @routes.get("/xcroller/media/{media_id}")
    async def get_media(request):
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        id_res = _parse_id(request.match_info.get("media_id"))
        if not id_res.ok:
            return _json_response(id_res)
        return _json_response(await svc["index"].get_media(id_res.unwrap()))

    @routes.post("/xcroller/media/{media_id}/star")
    async def toggle_star(request):
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        id_res = _parse_id(request.match_info.get("media_id"))
        if not id_res.ok:
            return _json_response(id_res)
        return _json_response(await svc["index"].toggle_star(id_res.unwrap()))

    @routes.post("/xcroller/media/{media_id}/dimensions")
    async def update_dimensions(request):
        """Body: {"width": int, "height": int}"""
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        id_res = _parse_id(request.match_info.get("media_id"))
        if not id_res.ok:
            return _json_response(id_res)

        body_res = await _read_json(request)
        if not body_res.ok:
            return _json_response(body_res)
        body = body_res.data or {}
        width = parse_int(body.get("width"))
        height = parse_int(body.get("height"))
        if width is None or height is None:
            return _json_response(Result.Err(ErrorCode.INVALID_INPUT, "'width' and 'height' are required"))

        result = await svc["index"].update_dimensions(id_res.unwrap(), width, height)
        return _json_response(result)
