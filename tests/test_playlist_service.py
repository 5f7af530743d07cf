"""Playlists: ordered, duplicate-free, owner-managed."""

import uuid
from datetime import datetime, timezone

import pytest

from clipshare.core.errors import InvalidInput, InvalidOperation, NotFound
from clipshare.models.models import Playlist, PlaylistItem
from clipshare.services.content.content_service import content_service
from clipshare.services.playlists.playlist_service import playlist_service
from clipshare.services.store.repository import Repository


@pytest.fixture
async def playlist(db, alice):
    return await playlist_service.create_playlist(alice.id, "Favourites", "Things I like", db)


async def test_create_returns_expanded_view(playlist, alice):
    assert playlist["name"] == "Favourites"
    assert playlist["videos"] == []
    assert playlist["owner"]["id"] == alice.id


@pytest.mark.parametrize("name,description", [("", "d"), ("n", " "), (None, "d")])
async def test_create_requires_name_and_description(db, alice, name, description):
    with pytest.raises(InvalidInput):
        await playlist_service.create_playlist(alice.id, name, description, db)


async def test_duplicate_add_is_rejected(db, alice, playlist, make_video):
    video = await make_video(alice)
    await playlist_service.add_video(alice.id, playlist["id"], video.id, db)

    with pytest.raises(InvalidOperation, match="already in the playlist"):
        await playlist_service.add_video(alice.id, playlist["id"], video.id, db)

    assert await Repository(PlaylistItem, db).count(playlist_id=playlist["id"]) == 1


async def test_racing_duplicate_add_hits_constraint(db, alice, playlist, make_video, monkeypatch):
    video = await make_video(alice)
    await playlist_service.add_video(alice.id, playlist["id"], video.id, db)

    original = Repository.find_one

    async def stale_find_one(self, **filters):
        if self.model is PlaylistItem:
            return None
        return await original(self, **filters)

    monkeypatch.setattr(Repository, "find_one", stale_find_one)
    with pytest.raises(InvalidOperation, match="already in the playlist"):
        await playlist_service.add_video(alice.id, playlist["id"], video.id, db)

    assert await Repository(PlaylistItem, db).count(playlist_id=playlist["id"]) == 1


async def test_add_missing_video(db, alice, playlist):
    with pytest.raises(NotFound, match="Video not found"):
        await playlist_service.add_video(alice.id, playlist["id"], uuid.uuid4(), db)


async def test_add_post_is_not_a_video(db, alice, playlist):
    post = await content_service.create_post(alice.id, "text only", db)
    with pytest.raises(NotFound, match="Video not found"):
        await playlist_service.add_video(alice.id, playlist["id"], post["id"], db)


async def test_remove_video_and_remove_again(db, alice, playlist, make_video):
    first = await make_video(alice, index=0)
    second = await make_video(alice, index=1)
    await playlist_service.add_video(alice.id, playlist["id"], first.id, db)
    await playlist_service.add_video(alice.id, playlist["id"], second.id, db)

    after = await playlist_service.remove_video(alice.id, playlist["id"], first.id, db)
    again = await playlist_service.remove_video(alice.id, playlist["id"], first.id, db)

    assert [v["id"] for v in after["videos"]] == [second.id]
    assert [v["id"] for v in again["videos"]] == [second.id]


async def test_readd_goes_to_the_end(db, alice, playlist, make_video):
    first = await make_video(alice, index=0)
    second = await make_video(alice, index=1)
    for video in (first, second):
        await playlist_service.add_video(alice.id, playlist["id"], video.id, db)
    await playlist_service.remove_video(alice.id, playlist["id"], first.id, db)

    view = await playlist_service.add_video(alice.id, playlist["id"], first.id, db)

    assert [v["id"] for v in view["videos"]] == [second.id, first.id]


async def test_update_requires_a_field(db, alice, playlist):
    with pytest.raises(InvalidOperation):
        await playlist_service.update_playlist(alice.id, playlist["id"], db, name=" ", description=None)


async def test_update_description_only(db, alice, playlist):
    updated = await playlist_service.update_playlist(alice.id, playlist["id"], db, description="Refined")
    assert updated["name"] == "Favourites"
    assert updated["description"] == "Refined"


async def test_delete_removes_entries(db, alice, playlist, make_video):
    video = await make_video(alice)
    await playlist_service.add_video(alice.id, playlist["id"], video.id, db)

    await playlist_service.delete_playlist(alice.id, playlist["id"], db)

    assert not await Repository(Playlist, db).exists(playlist["id"])
    assert await Repository(PlaylistItem, db).count(playlist_id=playlist["id"]) == 0
    with pytest.raises(NotFound):
        await playlist_service.get_playlist(playlist["id"], db)


async def test_list_user_playlists_counts_videos(db, alice, bob, playlist, make_video):
    await playlist_service.create_playlist(bob.id, "Bob's", "Not alice's", db)
    for i in range(3):
        video = await make_video(alice, index=i)
        await playlist_service.add_video(alice.id, playlist["id"], video.id, db)

    page = await playlist_service.list_user_playlists(alice.id, db)

    assert page.total_items == 1
    assert page.items[0]["video_count"] == 3
    assert "video_ids" not in page.items[0]


async def test_shared_position_falls_back_to_insertion_time(db, alice, playlist, make_video):
    early = await make_video(alice, index=0)
    late = await make_video(alice, index=1)
    entries = Repository(PlaylistItem, db)
    # Two concurrent appends both computed position 0
    await entries.create(
        playlist_id=playlist["id"], content_id=late.id, position=0,
        created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )
    await entries.create(
        playlist_id=playlist["id"], content_id=early.id, position=0,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    view = await playlist_service.get_playlist(playlist["id"], db)

    assert [v["id"] for v in view["videos"]] == [early.id, late.id]
