"""Channel statistics and the dashboard video list."""

import pytest

from clipshare.core.errors import InvalidInput
from clipshare.services.comments.comment_service import comment_service
from clipshare.services.social.toggle_service import toggle_engine
from clipshare.services.stats.stats_service import channel_stats_service


async def test_owner_without_content_gets_zeros(db, alice):
    await db.commit()

    stats = await channel_stats_service.channel_stats(alice.id)

    assert stats.video_count == 0
    assert stats.total_views == 0
    assert stats.subscriber_count == 0
    assert stats.like_count == 0
    assert stats.comment_count == 0
    assert stats.computed_at is not None


async def test_counts_cover_owned_videos_only(db, alice, bob, make_video):
    first = await make_video(alice, index=0, view_count=10)
    await make_video(alice, index=1, view_count=5, published=False)
    other = await make_video(bob, index=2, view_count=1000)

    await toggle_engine.toggle_video_like(bob.id, first.id, db)
    await toggle_engine.toggle_video_like(alice.id, first.id, db)
    await toggle_engine.toggle_video_like(alice.id, other.id, db)
    await toggle_engine.toggle_subscription(bob.id, alice.id, db)
    await comment_service.add_comment(bob.id, first.id, "great", db)
    await comment_service.add_comment(alice.id, other.id, "thanks", db)
    await db.commit()

    stats = await channel_stats_service.channel_stats(alice.id)

    assert stats.video_count == 2
    assert stats.total_views == 15
    assert stats.subscriber_count == 1
    assert stats.like_count == 2
    assert stats.comment_count == 1


async def test_single_like_scenario(db, alice, bob, make_video):
    video = await make_video(alice)
    await toggle_engine.toggle_video_like(bob.id, video.id, db)
    await db.commit()

    stats = await channel_stats_service.channel_stats(alice.id)

    assert stats.like_count == 1
    assert stats.video_count == 1


async def test_unlike_drops_the_count(db, alice, bob, make_video):
    video = await make_video(alice)
    await toggle_engine.toggle_video_like(bob.id, video.id, db)
    await toggle_engine.toggle_video_like(bob.id, video.id, db)
    await db.commit()

    assert (await channel_stats_service.channel_stats(alice.id)).like_count == 0


class TestChannelVideos:

    async def test_drafts_included_by_default(self, db, alice, make_video):
        await make_video(alice, index=0)
        await make_video(alice, index=1, published=False)

        page = await channel_stats_service.channel_videos(alice.id, db)

        assert page.total_items == 2
        assert all("like_count" in v and "comment_count" in v for v in page.items)

    @pytest.mark.parametrize("status,expected", [("published", 1), ("draft", 1), ("all", 2)])
    async def test_status_filter(self, db, alice, make_video, status, expected):
        await make_video(alice, index=0)
        await make_video(alice, index=1, published=False)

        page = await channel_stats_service.channel_videos(alice.id, db, status=status)

        assert page.total_items == expected

    async def test_unknown_status(self, db, alice):
        with pytest.raises(InvalidInput):
            await channel_stats_service.channel_videos(alice.id, db, status="archived")
