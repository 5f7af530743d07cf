"""
Clipshare Channel Stats — dashboard fan-out for one owner.

The five sub-queries are independent reads, so each runs on its own session
and they are awaited together. No ordering between them is implied.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clipshare.core.database import async_session_factory, store_errors
from clipshare.core.errors import InvalidInput
from clipshare.models.models import Comment, ContentItem, ContentKind, Edge, EdgeKind
from clipshare.schemas.schemas import ChannelStats, PageResult
from clipshare.services.pipeline.builder import PipelineBuilder
from clipshare.services.pipeline.executor import pagination_executor
from clipshare.services.store.repository import parse_id

logger = logging.getLogger(__name__)

VIDEO_STATUS_FILTERS = {
    "all": None,
    "published": True,
    "draft": False,
}


class ChannelStatsService:
    """Owner-scoped counts and the owner's video listing."""

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self._session_factory = session_factory or async_session_factory

    async def _scalar(self, query, label: str) -> int:
        async with self._session_factory() as session:
            async with store_errors(f"channel stats: {label}"):
                value = await session.scalar(query)
        return int(value or 0)

    async def channel_stats(self, owner_id: Any, content_kind: ContentKind = ContentKind.VIDEO) -> ChannelStats:
        """Counts for one owner. An owner with no content gets all zeros."""
        owner_id = parse_id(owner_id, "channel")
        owned = (ContentItem.owner_id == owner_id, ContentItem.kind == content_kind)
        owned_ids = select(ContentItem.id).where(*owned)

        video_count, total_views, subscriber_count, like_count, comment_count = await asyncio.gather(
            self._scalar(select(func.count(ContentItem.id)).where(*owned), "videos"),
            self._scalar(select(func.coalesce(func.sum(ContentItem.view_count), 0)).where(*owned), "views"),
            self._scalar(
                select(func.count(Edge.id)).where(Edge.kind == EdgeKind.FOLLOW, Edge.target_id == owner_id),
                "subscribers",
            ),
            self._scalar(
                select(func.count(Edge.id)).where(Edge.kind == EdgeKind.LIKE, Edge.target_id.in_(owned_ids)),
                "likes",
            ),
            self._scalar(select(func.count(Comment.id)).where(Comment.content_id.in_(owned_ids)), "comments"),
        )

        logger.debug(f"Channel stats computed for {owner_id}")
        return ChannelStats(
            video_count=video_count,
            total_views=total_views,
            subscriber_count=subscriber_count,
            like_count=like_count,
            comment_count=comment_count,
            computed_at=datetime.now(timezone.utc),
        )

    async def channel_videos(
        self,
        owner_id: Any,
        db: AsyncSession,
        status: str = "all",
        page: int = 1,
        limit: Optional[int] = None,
    ) -> PageResult:
        """The owner's videos, drafts included, with like and comment counts."""
        if status not in VIDEO_STATUS_FILTERS:
            raise InvalidInput("status must be one of: all, published, draft")

        builder = (
            PipelineBuilder("content_items")
            .owned_by(parse_id(owner_id, "channel"))
            .where(kind=ContentKind.VIDEO)
            .sort_by("created_at", "desc")
            .join_child_count("edges", "target_id", "like_count", where={"kind": EdgeKind.LIKE})
            .join_child_count("comments", "content_id", "comment_count")
        )
        published = VIDEO_STATUS_FILTERS[status]
        if published is not None:
            builder.where(published=published)

        return await pagination_executor.paginate(builder.build(), db, page=page, limit=limit)


channel_stats_service = ChannelStatsService()
