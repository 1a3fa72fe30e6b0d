"""
Feed endpoints: saved queries.
"""
from aiohttp import web

from ..core import _json_response, _parse_id, _parse_page, _read_json, _require_services
from xcroller_backend.features.feeds import Feed


def register_feed_routes(routes: web.RouteTableDef) -> None:
    @routes.get("/xcroller/feeds")
    async def list_feeds(request):
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        return _json_response(await svc["feeds"].list_feeds())

    @routes.post("/xcroller/feeds")
    async def save_feed(request):
        """
        Create a feed, or update it when the body carries an `id`.

        Body: {"id"?: int, "name": str, "folder_paths": [str], "filter_config": FilterOptions}
        """
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        body_res = await _read_json(request)
        if not body_res.ok:
            return _json_response(body_res)
        return _json_response(await svc["feeds"].save_feed(Feed.from_dict(body_res.data or {})))

    @routes.delete("/xcroller/feeds/{feed_id}")
    async def delete_feed(request):
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        id_res = _parse_id(request.match_info.get("feed_id"))
        if not id_res.ok:
            return _json_response(id_res)
        return _json_response(await svc["feeds"].delete_feed(id_res.unwrap()))

    @routes.post("/xcroller/feeds/{feed_id}/media")
    async def query_feed(request):
        """Body: {"limit": int, "offset": int}"""
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        id_res = _parse_id(request.match_info.get("feed_id"))
        if not id_res.ok:
            return _json_response(id_res)
        body_res = await _read_json(request)
        if not body_res.ok:
            return _json_response(body_res)
        limit, offset = _parse_page(body_res.data or {})
        result = await svc["feeds"].query_feed(id_res.unwrap(), limit=limit, offset=offset)
        return _json_response(result)
