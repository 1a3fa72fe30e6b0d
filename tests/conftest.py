import sys
from pathlib import Path

import pytest
import pytest_asyncio

from .repo_root import REPO_ROOT

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest_asyncio.fixture
async def services(tmp_path):
    from xcroller_backend.deps import build_services, dispose_services

    db_path = str(tmp_path / "test_services.db")
    svc_res = await build_services(db_path, start_backfill=False)
    assert svc_res.ok, svc_res.error
    svc = svc_res.data
    try:
        yield svc
    finally:
        await dispose_services(svc)


@pytest.fixture
def make_image():
    """Write a real image file of the given size with Pillow."""
    from PIL import Image

    def _make(path: Path, width: int, height: int, fmt: str | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", (width, height), color=(40, 80, 120)).save(path, format=fmt)
        return path

    return _make
