"""
Folder registry endpoints.
"""
from aiohttp import web

from ..core import _json_response, _read_json, _require_services
from xcroller_backend.shared import ErrorCode, Result


async def _folder_path_from_body(request: web.Request) -> Result[str]:
    body_res = await _read_json(request)
    if not body_res.ok:
        return body_res
    path = (body_res.data or {}).get("path")
    if not isinstance(path, str) or not path.strip():
        return Result.Err(ErrorCode.INVALID_INPUT, "Missing 'path'")
    return Result.Ok(path)


def register_folder_routes(routes: web.RouteTableDef) -> None:
    @routes.get("/xcroller/folders")
    async def list_folders(request):
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        return _json_response(await svc["folders"].list_folders())

    @routes.post("/xcroller/folders")
    async def add_folder(request):
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        path_res = await _folder_path_from_body(request)
        if not path_res.ok:
            return _json_response(path_res)
        return _json_response(await svc["folders"].add(path_res.unwrap()))

    @routes.post("/xcroller/folders/remove")
    async def remove_folder(request):
        svc, error_result = _require_services(request)
        if error_result:
            return _json_response(error_result)
        path_res = await _folder_path_from_body(request)
        if not path_res.ok:
            return _json_response(path_res)
        return _json_response(await svc["folders"].remove(path_res.unwrap()))
