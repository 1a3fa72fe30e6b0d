import json

import pytest
from aiohttp import web
from aiohttp.test_utils import make_mocked_request

from xcroller_backend.routes.core import SERVICES_KEY
from xcroller_backend.routes.handlers import feeds as feeds_mod
from xcroller_backend.routes.handlers import folders as folders_mod
from xcroller_backend.routes.handlers import scan as scan_mod
from xcroller_backend.shared import Result
from tests.helpers import insert_media


def _build_app(services) -> web.Application:
    app = web.Application()
    routes = web.RouteTableDef()
    scan_mod.register_scan_routes(routes)
    folders_mod.register_folder_routes(routes)
    feeds_mod.register_feed_routes(routes)
    app.add_routes(routes)
    app[SERVICES_KEY] = services
    return app


def _with_body(monkeypatch, module, body):
    async def _read_json(_request):
        return Result.Ok(body)

    monkeypatch.setattr(module, "_read_json", _read_json)


async def _call(app, method, path):
    req = make_mocked_request(method, path, app=app)
    match = await app.router.resolve(req)
    req = make_mocked_request(method, path, app=app, match_info=dict(match))
    resp = await match.handler(req)
    return json.loads(resp.text)


@pytest.mark.asyncio
async def test_scan_route(monkeypatch, services, tmp_path, make_image) -> None:
    make_image(tmp_path / "lib" / "a.png", 2, 2)
    make_image(tmp_path / "lib" / "sub" / "b.png", 2, 2)
    app = _build_app(services)

    _with_body(monkeypatch, scan_mod, {"path": str(tmp_path / "lib"), "recursive": "false"})
    body = await _call(app, "POST", "/xcroller/scan")
    assert body["ok"] is True
    assert body["data"] == 1

    _with_body(monkeypatch, scan_mod, {"path": str(tmp_path / "lib")})
    assert (await _call(app, "POST", "/xcroller/scan"))["data"] == 2

    _with_body(monkeypatch, scan_mod, {"recursive": True})
    assert (await _call(app, "POST", "/xcroller/scan"))["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_folder_routes(monkeypatch, services) -> None:
    await insert_media(services["db"], "C:/Media/a.png")
    app = _build_app(services)

    _with_body(monkeypatch, folders_mod, {"path": "c:\\Media"})
    body = await _call(app, "POST", "/xcroller/folders")
    assert body["data"] == "C:/Media"

    listed = await _call(app, "GET", "/xcroller/folders")
    assert [f["path"] for f in listed["data"]] == ["C:/Media"]

    body = await _call(app, "POST", "/xcroller/folders/remove")
    assert body["data"] == {"path": "C:/Media", "removed_media": 1}
    assert (await _call(app, "GET", "/xcroller/folders"))["data"] == []

    _with_body(monkeypatch, folders_mod, {"path": 3})
    assert (await _call(app, "POST", "/xcroller/folders/remove"))["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_feed_routes(monkeypatch, services) -> None:
    await insert_media(services["db"], "/lib/a/one.png", starred=True)
    await insert_media(services["db"], "/lib/a/two.png")
    await insert_media(services["db"], "/lib/b/three.png", starred=True)
    app = _build_app(services)

    _with_body(
        monkeypatch,
        feeds_mod,
        {"name": "Favs in A", "folder_paths": ["/lib/a"], "filter_config": {"favorites_only": True}},
    )
    saved = await _call(app, "POST", "/xcroller/feeds")
    assert saved["ok"] is True
    assert saved["meta"]["created"] is True
    feed_id = saved["data"]["id"]
    assert saved["data"]["filter_config"]["favorites_only"] is True

    listed = await _call(app, "GET", "/xcroller/feeds")
    assert [f["name"] for f in listed["data"]] == ["Favs in A"]

    _with_body(monkeypatch, feeds_mod, {"limit": 50})
    items = await _call(app, "POST", f"/xcroller/feeds/{feed_id}/media")
    assert [i["path"] for i in items["data"]] == ["/lib/a/one.png"]

    deleted = await _call(app, "DELETE", f"/xcroller/feeds/{feed_id}")
    assert deleted["data"] is True
    missing = await _call(app, "POST", f"/xcroller/feeds/{feed_id}/media")
    assert missing["code"] == "NOT_FOUND"

    _with_body(monkeypatch, feeds_mod, {"name": ""})
    assert (await _call(app, "POST", "/xcroller/feeds"))["code"] == "INVALID_INPUT"
