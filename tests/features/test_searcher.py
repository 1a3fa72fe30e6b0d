import pytest

from xcroller_backend.features.index import FilterOptions
from xcroller_backend.features.index.searcher import build_media_query, build_order_by, clamp_page
from tests.helpers import insert_media


async def _seed_scenario(db):
    ids = {}
    ids["wide"] = await insert_media(db, "/lib/a/wide.png", size=300, created_at=1, width=100, height=50)
    ids["tall"] = await insert_media(db, "/lib/a/tall.jpg", size=100, created_at=2, width=50, height=100)
    ids["square"] = await insert_media(db, "/lib/b/square.webp", size=200, created_at=3, width=80, height=80)
    ids["clip"] = await insert_media(db, "/lib/b/clip.mp4", "video", size=900, created_at=4, duration=12.5)
    return ids


async def _query(services, limit=100, offset=0, **filters):
    res = await services["index"].query(FilterOptions.from_dict(filters), limit=limit, offset=offset)
    assert res.ok, res.error
    return res.data


@pytest.mark.asyncio
async def test_square_orientation_returns_only_the_square_image(services):
    ids = await _seed_scenario(services["db"])
    items = await _query(services, orientation="square")
    assert [i.id for i in items] == [ids["square"]]


@pytest.mark.asyncio
async def test_known_duration_is_not_escaped_by_null_policy(services):
    await _seed_scenario(services["db"])
    assert await _query(services, media_type="video", max_duration=10) == []
    assert len(await _query(services, media_type="video", max_duration=20)) == 1


@pytest.mark.asyncio
async def test_unknown_duration_satisfies_both_bounds(services):
    db = services["db"]
    unknown = await insert_media(db, "/lib/unknown.mp4", "video")
    await insert_media(db, "/lib/long.mp4", "video", duration=600.0)
    await insert_media(db, "/lib/short.mp4", "video", duration=2.0)

    items = await _query(services, min_duration=5, max_duration=60)
    assert [i.id for i in items] == [unknown]


@pytest.mark.asyncio
async def test_non_positive_duration_bounds_are_ignored(services):
    await _seed_scenario(services["db"])
    assert len(await _query(services, max_duration=0)) == 4
    assert len(await _query(services, min_duration=-3)) == 4


@pytest.mark.asyncio
async def test_orientation_all_and_kind_all_are_no_ops(services):
    await _seed_scenario(services["db"])
    assert len(await _query(services, orientation="all", media_type="all")) == 4
    assert [i.path for i in await _query(services, orientation="horizontal")] == ["/lib/a/wide.png"]
    assert [i.path for i in await _query(services, orientation="vertical")] == ["/lib/a/tall.jpg"]


@pytest.mark.asyncio
async def test_favorites_and_kind_filters_hold_for_every_result(services):
    db = services["db"]
    await _seed_scenario(db)
    await insert_media(db, "/lib/c/fav.mp4", "video", starred=True, duration=3.0)
    await insert_media(db, "/lib/c/fav.png", starred=True, width=1, height=1)

    favorites = await _query(services, favorites_only=True)
    assert len(favorites) == 2
    assert all(i.starred for i in favorites)

    videos = await _query(services, media_type="video")
    assert len(videos) == 2
    assert all(i.file_type == "video" for i in videos)


@pytest.mark.asyncio
async def test_dimension_and_size_bounds_are_inclusive(services):
    await _seed_scenario(services["db"])
    assert {i.path for i in await _query(services, min_width=80)} == {"/lib/a/wide.png", "/lib/b/square.webp"}
    assert {i.path for i in await _query(services, min_height=100)} == {"/lib/a/tall.jpg"}
    assert {i.path for i in await _query(services, min_size=200, max_size=300)} == {
        "/lib/a/wide.png",
        "/lib/b/square.webp",
    }


@pytest.mark.asyncio
async def test_extension_filter_is_case_insensitive_and_escaped(services):
    db = services["db"]
    await insert_media(db, "/lib/UPPER.PNG")
    await insert_media(db, "/lib/o'brien.jpg")
    await insert_media(db, "/lib/clip.mp4", "video")
    await insert_media(db, "/lib/odd.p_g")

    assert {i.path for i in await _query(services, extensions=["png", ".JPG"])} == {
        "/lib/UPPER.PNG",
        "/lib/o'brien.jpg",
    }
    assert await _query(services, extensions=["p_g'; DROP TABLE media_items; --"]) == []
    assert [i.path for i in await _query(services, extensions=["p_g"])] == ["/lib/odd.p_g"]
    assert len(await _query(services)) == 4


@pytest.mark.asyncio
async def test_folder_scope_is_an_or_of_prefixes(services):
    await _seed_scenario(services["db"])
    await insert_media(services["db"], "/lib/it's here/x.png")

    assert {i.path for i in await _query(services, folder_paths=["/lib/a"])} == {
        "/lib/a/wide.png",
        "/lib/a/tall.jpg",
    }
    assert len(await _query(services, folder_paths=["/lib/a", "/lib/b"])) == 4
    assert [i.path for i in await _query(services, folder_paths=["/lib/it's here"])] == ["/lib/it's here/x.png"]
    assert await _query(services, folder_paths=["/LIB/A"]) == []


@pytest.mark.asyncio
async def test_sorting(services):
    await _seed_scenario(services["db"])
    newest_first = [i.path.rsplit("/", 1)[-1] for i in await _query(services)]
    assert newest_first == ["clip.mp4", "square.webp", "tall.jpg", "wide.png"]

    by_size = [i.size_bytes for i in await _query(services, sort_by="size", sort_order="asc")]
    assert by_size == [100, 200, 300, 900]

    by_path = [i.path for i in await _query(services, sort_by="filename", sort_order="asc")]
    assert by_path == sorted(by_path)

    by_resolution = [i.path for i in await _query(services, sort_by="resolution", media_type="image")]
    # wide and tall tie on 5000 pixels; the id tie-breaker follows the sort direction.
    assert by_resolution == ["/lib/b/square.webp", "/lib/a/tall.jpg", "/lib/a/wide.png"]

    shuffled = await _query(services, sort_by="random")
    assert len(shuffled) == 4


@pytest.mark.asyncio
async def test_pages_concatenate_to_the_full_result(services):
    db = services["db"]
    for i in range(23):
        await insert_media(db, f"/lib/p/{i:02d}.png", size=i % 4, created_at=i % 3)

    full = [i.id for i in await _query(services, sort_by="size", sort_order="asc")]
    pages = []
    for offset in range(0, 30, 5):
        pages.extend(i.id for i in await _query(services, limit=5, offset=offset, sort_by="size", sort_order="asc"))
    assert pages == full
    assert len(set(pages)) == 23


@pytest.mark.asyncio
async def test_query_meta_reports_clamped_page(services):
    await _seed_scenario(services["db"])
    res = await services["index"].query(None, limit=10**9, offset=-5)
    assert res.ok
    assert res.meta["limit"] == 5000
    assert res.meta["offset"] == 0
    assert res.meta["count"] == 4


def test_query_text_never_contains_user_values():
    filters = FilterOptions.from_dict(
        {"extensions": ["x'y"], "folder_paths": ["/a'b"], "media_type": "video'; --", "min_width": 5}
    )
    sql, params = build_media_query(filters, 10, 0)
    assert "'y" not in sql and "/a'b" not in sql and "video'" not in sql
    assert "/a'b" in params
    assert "video'; --" in params
    assert params[-2:] == (10, 0)


def test_order_by_and_page_clamping():
    assert build_order_by(FilterOptions()) == "ORDER BY created_at DESC, id DESC"
    assert build_order_by(FilterOptions(sort_by="resolution", sort_order="asc")) == "ORDER BY (width * height) ASC, id ASC"
    assert build_order_by(FilterOptions(sort_by="random", sort_order="asc")) == "ORDER BY RANDOM()"
    assert clamp_page("abc", None) == (5000, 0)
    assert clamp_page(-1, -1) == (0, 0)
    assert clamp_page(10, 10**30) == (10, 2**63 - 1)


@pytest.mark.asyncio
async def test_huge_numeric_filters_are_answered_not_raised(services):
    await _seed_scenario(services["db"])
    assert await _query(services, min_size=1e30) == []
    assert await _query(services, min_size="1e30", min_width="9" * 40) == []
    assert len(await _query(services, max_size=1e30)) == 4
    assert await _query(services, offset=10**30) == []


@pytest.mark.asyncio
async def test_out_of_range_value_becomes_an_error_result(services):
    res = await services["index"].query(FilterOptions(min_size=10**30))
    assert not res.ok
    assert res.code == "QUERY_FAILED"
