import pytest
from aiohttp import test_utils

from xcroller_backend.app import create_app
from xcroller_backend.observability import REQUEST_ID_HEADER
from xcroller_backend.routes.core import SERVICES_KEY
from tests.helpers import write_mp4


@pytest.mark.asyncio
async def test_app_serves_catalog_end_to_end(tmp_path, make_image) -> None:
    make_image(tmp_path / "lib" / "wide.png", 100, 50)
    write_mp4(tmp_path / "lib" / "clip.mp4", 12.5)
    app = create_app(str(tmp_path / "catalog.db"), start_backfill=False)

    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        assert app[SERVICES_KEY]["db"] is not None

        resp = await client.post("/xcroller/scan", json={"path": str(tmp_path / "lib")})
        body = await resp.json()
        assert body["ok"] is True
        assert body["data"] == 2

        resp = await client.post("/xcroller/media", json={"filters": {"media_type": "video", "max_duration": 10}})
        body = await resp.json()
        assert body["ok"] is True
        assert body["data"] == []

        resp = await client.post("/xcroller/media", data=b"{broken")
        body = await resp.json()
        assert body["code"] == "INVALID_JSON"


@pytest.mark.asyncio
async def test_request_id_is_echoed_or_generated(tmp_path) -> None:
    app = create_app(str(tmp_path / "catalog.db"), start_backfill=False)

    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        resp = await client.get("/xcroller/folders", headers={REQUEST_ID_HEADER: "abc-123"})
        assert resp.headers[REQUEST_ID_HEADER] == "abc-123"

        resp = await client.get("/xcroller/folders")
        generated = resp.headers[REQUEST_ID_HEADER]
        assert len(generated) == 32

        resp = await client.get("/xcroller/nowhere")
        assert resp.status == 404
        assert resp.headers.get(REQUEST_ID_HEADER)


@pytest.mark.asyncio
async def test_startup_failure_reports_service_unavailable(tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    app = create_app(str(blocker / "catalog.db"), start_backfill=False)

    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        resp = await client.get("/xcroller/feeds")
        body = await resp.json()
        assert body["ok"] is False
        assert body["code"] == "SERVICE_UNAVAILABLE"
