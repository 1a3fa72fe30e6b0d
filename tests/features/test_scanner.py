import asyncio
import os
import threading

import pytest

from xcroller_backend.features.index.filters import FilterOptions
from xcroller_backend.features.index.scanner import IndexScanner
from xcroller_backend.features.metadata import Metadata
from xcroller_backend.path_utils import normalize_path
from tests.helpers import insert_media, write_mp4


@pytest.fixture
def media_dir(tmp_path, make_image):
    root = tmp_path / "library"
    make_image(root / "wide.png", 100, 50)
    make_image(root / "tall.jpg", 50, 100)
    make_image(root / "nested" / "square.png", 80, 80)
    write_mp4(root / "nested" / "clip.mp4", 12.5)
    (root / "nested" / "notes.txt").write_text("skip me")
    return root


async def _rows(db):
    res = await db.aquery("SELECT * FROM media_items ORDER BY path")
    assert res.ok, res.error
    return res.data


@pytest.mark.asyncio
async def test_scan_registers_supported_files_with_metadata(services, media_dir):
    res = await services["index"].scan_directory(str(media_dir))
    assert res.ok, res.error
    assert res.data == 4

    rows = {r["path"].rsplit("/", 1)[-1]: r for r in await _rows(services["db"])}
    assert set(rows) == {"wide.png", "tall.jpg", "square.png", "clip.mp4"}
    assert (rows["wide.png"]["width"], rows["wide.png"]["height"]) == (100, 50)
    assert rows["square.png"]["file_type"] == "image"
    assert rows["clip.mp4"]["file_type"] == "video"
    assert rows["clip.mp4"]["duration_sec"] == pytest.approx(12.5)
    assert all(r["size_bytes"] > 0 for r in rows.values())
    assert all(not r["starred"] for r in rows.values())


@pytest.mark.asyncio
async def test_scan_registers_the_folder(services, media_dir):
    await services["index"].scan_directory(str(media_dir))
    folders = (await services["folders"].list_folders()).unwrap()
    assert [f.path for f in folders] == [normalize_path(str(media_dir))]


@pytest.mark.asyncio
async def test_rescan_is_idempotent_and_reports_visited_count(services, media_dir):
    first = await services["index"].scan_directory(str(media_dir))
    before = await _rows(services["db"])
    second = await services["index"].scan_directory(str(media_dir))
    after = await _rows(services["db"])

    assert first.data == second.data == 4
    assert second.meta["written"] == 0
    assert [(r["id"], r["path"]) for r in before] == [(r["id"], r["path"]) for r in after]


@pytest.mark.asyncio
async def test_non_recursive_scan_only_counts_top_level(services, media_dir):
    res = await services["index"].scan_directory(str(media_dir), recursive=False)
    assert res.ok
    assert res.data == 2
    assert len(await _rows(services["db"])) == 2


@pytest.mark.asyncio
async def test_rescan_keeps_star_and_manual_dimensions(services, media_dir):
    index = services["index"]
    await index.scan_directory(str(media_dir))
    rows = {r["path"].rsplit("/", 1)[-1]: r for r in await _rows(services["db"])}

    assert (await index.toggle_star(rows["wide.png"]["id"])).data is True
    assert (await index.update_dimensions(rows["tall.jpg"]["id"], 7, 9)).ok

    await index.scan_directory(str(media_dir))
    rows = {r["path"].rsplit("/", 1)[-1]: r for r in await _rows(services["db"])}
    assert rows["wide.png"]["starred"]
    assert (rows["tall.jpg"]["width"], rows["tall.jpg"]["height"]) == (7, 9)


@pytest.mark.asyncio
async def test_rescan_fills_missing_metadata(services, media_dir):
    db = services["db"]
    wide = normalize_path(str(media_dir / "wide.png"))
    media_id = await insert_media(db, wide, "image", size=1, created_at=5)

    await services["index"].scan_directory(str(media_dir))
    row = (await services["index"].get_media(media_id)).unwrap()
    assert (row.width, row.height) == (100, 50)
    assert row.size_bytes == 1
    assert row.created_at == 5


@pytest.mark.asyncio
async def test_small_batches_and_failed_probes(services, tmp_path, make_image):
    root = tmp_path / "many"
    for i in range(5):
        make_image(root / f"img_{i}.png", 10 + i, 10)

    scanner = IndexScanner(services["db"], services["folders"], batch_size=2, prober=lambda path, kind: Metadata())
    res = await scanner.scan_directory(str(root))
    assert res.ok
    assert res.data == 5
    rows = await _rows(services["db"])
    assert len(rows) == 5
    assert all(r["width"] is None and r["height"] is None for r in rows)


@pytest.mark.asyncio
async def test_invalid_scan_targets(services, tmp_path):
    index = services["index"]
    missing = await index.scan_directory(str(tmp_path / "does-not-exist"))
    assert not missing.ok
    assert missing.code == "INVALID_INPUT"

    a_file = tmp_path / "file.png"
    a_file.write_bytes(b"x")
    assert (await index.scan_directory(str(a_file))).code == "INVALID_INPUT"
    assert (await index.scan_directory("")).code == "INVALID_INPUT"
    assert (await index.scan_directory("/tmp/\x00bad")).code == "INVALID_INPUT"

    assert (await services["folders"].list_folders()).data == []


@pytest.mark.asyncio
async def test_unnormalized_folder_input_keys_folder_and_media_alike(services, media_dir):
    messy = str(media_dir.parent) + "//./" + media_dir.name + "/"
    res = await services["index"].scan_directory(messy)
    assert res.ok, res.error

    key = normalize_path(str(media_dir))
    folders = (await services["folders"].list_folders()).unwrap()
    assert [f.path for f in folders] == [key]
    assert all(r["path"].startswith(key + "/") for r in await _rows(services["db"]))

    scoped = await services["index"].query(FilterOptions.from_dict({"folder_paths": [key]}))
    assert scoped.ok
    assert len(scoped.data) == 4

    removed = (await services["folders"].remove(key)).unwrap()
    assert removed["removed_media"] == 4
    assert await _rows(services["db"]) == []


@pytest.mark.asyncio
async def test_relative_folder_is_stored_absolute(services, media_dir, monkeypatch):
    monkeypatch.chdir(media_dir.parent)
    res = await services["index"].scan_directory("./" + media_dir.name)
    assert res.ok, res.error

    key = normalize_path(str(media_dir))
    folders = (await services["folders"].list_folders()).unwrap()
    assert [f.path for f in folders] == [key]
    assert all(r["path"].startswith(key + "/") for r in await _rows(services["db"]))

    removed = (await services["folders"].remove(media_dir.name)).unwrap()
    assert removed["path"] == key
    assert removed["removed_media"] == 4


@pytest.mark.asyncio
async def test_concurrent_scans_keep_their_own_counts(services, tmp_path, make_image):
    first, second = tmp_path / "first", tmp_path / "second"
    for i in range(3):
        make_image(first / f"a_{i}.png", 10, 10)
    for i in range(5):
        make_image(second / f"b_{i}.png", 10, 10)

    scanner = IndexScanner(services["db"], services["folders"], batch_size=1)
    res_a, res_b = await asyncio.gather(
        scanner.scan_directory(str(first)),
        scanner.scan_directory(str(second)),
    )
    assert (res_a.data, res_a.meta["written"]) == (3, 3)
    assert (res_b.data, res_b.meta["written"]) == (5, 5)
    assert len(await _rows(services["db"])) == 8


@pytest.mark.asyncio
async def test_directory_check_runs_off_the_event_loop(services, media_dir, monkeypatch):
    loop_thread = threading.get_ident()
    callers = []
    real_isdir = os.path.isdir

    def recording_isdir(path):
        callers.append(threading.get_ident())
        return real_isdir(path)

    monkeypatch.setattr(os.path, "isdir", recording_isdir)
    assert (await services["index"].scan_directory(str(media_dir))).ok
    assert callers
    assert loop_thread not in callers
