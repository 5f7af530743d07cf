"""Pagination executor against a real (SQLite) store."""

import uuid

import pytest

from clipshare.core.errors import InvalidInput, NotFound
from clipshare.models.models import ContentKind, EdgeKind
from clipshare.services.pipeline.builder import PipelineBuilder
from clipshare.services.pipeline.executor import PaginationExecutor, pagination_executor
from clipshare.services.playlists.playlist_service import playlist_service
from clipshare.services.social.toggle_service import toggle_engine


@pytest.fixture
async def twenty_five_videos(db, alice, make_video):
    return [await make_video(alice, index=i) for i in range(25)]


def _feed():
    return PipelineBuilder("content_items").where(kind=ContentKind.VIDEO).sort_by("createdAt", "desc").build()


# =============================================================================
# Windowing
# =============================================================================


class TestWindowing:

    async def test_third_page_is_partial(self, db, twenty_five_videos):
        page = await pagination_executor.paginate(_feed(), db, page=3, limit=10)

        assert len(page.items) == 5
        assert page.total_items == 25
        assert page.total_pages == 3
        assert page.has_prev_page is True
        assert page.has_next_page is False

    async def test_page_past_the_end_is_empty(self, db, twenty_five_videos):
        page = await pagination_executor.paginate(_feed(), db, page=4, limit=10)

        assert page.items == []
        assert page.total_items == 25
        assert page.total_pages == 3

    async def test_pages_do_not_overlap(self, db, twenty_five_videos):
        seen = []
        for number in (1, 2, 3):
            page = await pagination_executor.paginate(_feed(), db, page=number, limit=10)
            seen.extend(item["id"] for item in page.items)

        assert len(seen) == 25
        assert set(seen) == {v.id for v in twenty_five_videos}

    async def test_sorted_newest_first(self, db, twenty_five_videos):
        page = await pagination_executor.paginate(_feed(), db, page=1, limit=25)
        stamps = [item["created_at"] for item in page.items]

        assert stamps == sorted(stamps, reverse=True)
        assert page.items[0]["title"] == "Video 24"

    async def test_equal_sort_keys_break_ties_deterministically(self, db, alice, make_video):
        for i in range(6):
            await make_video(alice, index=i, view_count=7)
        pipeline = PipelineBuilder("content_items").sort_by("view_count", "desc").build()

        first = await pagination_executor.paginate(pipeline, db, page=1, limit=3)
        second = await pagination_executor.paginate(pipeline, db, page=2, limit=3)

        titles = [i["title"] for i in first.items + second.items]
        assert titles == [f"Video {i}" for i in range(5, -1, -1)]

    async def test_empty_collection(self, db, alice):
        page = await pagination_executor.paginate(_feed(), db, page=1, limit=10)
        assert page.items == []
        assert page.total_items == 0
        assert page.total_pages == 0


class TestLimits:

    async def test_limit_is_clamped(self, db, twenty_five_videos):
        executor = PaginationExecutor(max_limit=20)
        page = await executor.paginate(_feed(), db, page=1, limit=500)

        assert page.limit == 20
        assert len(page.items) == 20

    async def test_default_limit(self, db, twenty_five_videos):
        page = await pagination_executor.paginate(_feed(), db)
        assert page.limit == 10
        assert len(page.items) == 10

    @pytest.mark.parametrize("page,limit", [(0, 10), (-1, 10), (1, 0)])
    async def test_invalid_page_request(self, db, page, limit):
        with pytest.raises(InvalidInput):
            await pagination_executor.paginate(_feed(), db, page=page, limit=limit)

    async def test_unknown_sort_field(self, db, alice):
        pipeline = PipelineBuilder("content_items").sort_by("popularity").build()
        with pytest.raises(InvalidInput):
            await pagination_executor.paginate(pipeline, db)

    async def test_unknown_collection(self, db):
        with pytest.raises(InvalidInput):
            await pagination_executor.paginate(PipelineBuilder("tweets").build(), db)


# =============================================================================
# Search and joins
# =============================================================================


class TestSearchAndJoins:

    async def test_search_is_case_insensitive_over_title_and_body(self, db, alice, make_video):
        await make_video(alice, index=0, title="Surfing Basics")
        await make_video(alice, index=1, body="how to SURF in winter")
        await make_video(alice, index=2, title="Cooking")

        pipeline = PipelineBuilder("content_items").search("surf").build()
        page = await pagination_executor.paginate(pipeline, db)

        assert page.total_items == 2

    async def test_search_treats_wildcards_literally(self, db, alice, make_video):
        await make_video(alice, index=0, title="100% fun")
        await make_video(alice, index=1, title="1000 fun")

        pipeline = PipelineBuilder("content_items").search("0%").build()
        page = await pagination_executor.paginate(pipeline, db)

        assert [i["title"] for i in page.items] == ["100% fun"]

    async def test_owner_profile_replaces_reference(self, db, alice, make_video):
        await make_video(alice)
        pipeline = PipelineBuilder("content_items").join_owner_profile().build()

        item = (await pagination_executor.paginate(pipeline, db)).items[0]

        assert "owner_id" not in item
        assert item["owner"] == {
            "id": alice.id,
            "display_name": "Alice Example",
            "handle": "alice",
            "avatar_url": "https://cdn.test/alice.png",
        }

    async def test_child_count_without_raw_list(self, db, alice, bob, make_video):
        liked = await make_video(alice, index=0)
        await make_video(alice, index=1)
        await toggle_engine.toggle_video_like(alice.id, liked.id, db)
        await toggle_engine.toggle_video_like(bob.id, liked.id, db)

        pipeline = (
            PipelineBuilder("content_items")
            .join_child_count("edges", "target_id", "like_count", where={"kind": EdgeKind.LIKE})
            .exclude("body")
            .build()
        )
        items = (await pagination_executor.paginate(pipeline, db)).items

        assert [i["like_count"] for i in items] == [0, 2]
        assert all("body" not in i and "likes" not in i for i in items)

    async def test_expand_ids_keeps_playlist_order(self, db, alice, make_video):
        videos = [await make_video(alice, index=i) for i in range(3)]
        playlist = await playlist_service.create_playlist(alice.id, "Mix", "Three videos", db)
        for video in (videos[2], videos[0], videos[1]):
            await playlist_service.add_video(alice.id, playlist["id"], video.id, db)

        expanded = await playlist_service.get_playlist(playlist["id"], db)

        assert [v["id"] for v in expanded["videos"]] == [videos[2].id, videos[0].id, videos[1].id]
        assert expanded["videos"][0]["owner"]["handle"] == "alice"
        assert "video_ids" not in expanded

    async def test_fetch_one_not_found(self, db):
        pipeline = PipelineBuilder("content_items").where(id=uuid.uuid4()).build()
        with pytest.raises(NotFound, match="Video not found"):
            await pagination_executor.fetch_one(pipeline, db, not_found="Video not found")
