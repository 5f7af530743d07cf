"""Comments and their like counts."""

import uuid

import pytest

from clipshare.core.errors import InvalidInput, InvalidOperation, NotFound
from clipshare.models.models import Edge
from clipshare.services.comments.comment_service import comment_service
from clipshare.services.social.toggle_service import toggle_engine
from clipshare.services.store.repository import Repository


async def test_add_and_list(db, alice, bob, make_video):
    video = await make_video(alice)
    await comment_service.add_comment(bob.id, video.id, "first!", db)
    latest = await comment_service.add_comment(alice.id, video.id, "thanks", db)
    await toggle_engine.toggle_comment_like(bob.id, latest["id"], db)

    page = await comment_service.list_comments(video.id, db)

    assert page.total_items == 2
    bodies = {c["body"]: c for c in page.items}
    assert bodies["thanks"]["like_count"] == 1
    assert bodies["first!"]["owner"]["handle"] == "bob"


async def test_comment_on_missing_content(db, alice):
    with pytest.raises(NotFound):
        await comment_service.add_comment(alice.id, uuid.uuid4(), "hello?", db)


async def test_blank_comment(db, alice, make_video):
    video = await make_video(alice)
    with pytest.raises(InvalidInput):
        await comment_service.add_comment(alice.id, video.id, "  ", db)


async def test_update_comment(db, alice, make_video):
    video = await make_video(alice)
    comment = await comment_service.add_comment(alice.id, video.id, "typo", db)

    updated = await comment_service.update_comment(alice.id, comment["id"], "fixed", db)

    assert updated["body"] == "fixed"
    with pytest.raises(InvalidOperation):
        await comment_service.update_comment(alice.id, comment["id"], "", db)


async def test_delete_comment_drops_its_likes(db, alice, bob, make_video):
    video = await make_video(alice)
    comment = await comment_service.add_comment(alice.id, video.id, "like me", db)
    await toggle_engine.toggle_comment_like(bob.id, comment["id"], db)

    await comment_service.delete_comment(alice.id, comment["id"], db)

    assert await Repository(Edge, db).count(target_id=comment["id"]) == 0
    assert (await comment_service.list_comments(video.id, db)).total_items == 0
