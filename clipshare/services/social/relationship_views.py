"""
Clipshare relationship read views — liked videos, subscribers, subscriptions.

All three are paginated pipelines over ``edges`` joined back to the actors
or content on either end.
"""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.models.models import Actor, EdgeKind, TargetType
from clipshare.schemas.schemas import PageResult
from clipshare.services.pipeline.builder import PipelineBuilder
from clipshare.services.pipeline.executor import pagination_executor
from clipshare.services.store.repository import Repository, parse_id


class RelationshipViews:

    async def _require_actor(self, actor_id: Any, db: AsyncSession, noun: str):
        return await Repository(Actor, db, noun).get(parse_id(actor_id, noun.lower()))

    async def liked_videos(self, actor_id: Any, db: AsyncSession, page: int = 1, limit: Optional[int] = None) -> PageResult:
        """Videos liked by ``actor_id``, newest like first, each with its publisher."""
        video_with_owner = PipelineBuilder("content_items").join_owner_profile().build()
        pipeline = (
            PipelineBuilder("edges")
            .where(source_id=parse_id(actor_id, "user"), kind=EdgeKind.LIKE, target_type=TargetType.VIDEO)
            .sort_by("created_at", "desc")
            .expand_ids("target_id", "content_items", as_field="video", nested=video_with_owner)
            .exclude("source_id", "target_type")
            .build()
        )
        return await pagination_executor.paginate(pipeline, db, page=page, limit=limit)

    async def channel_subscribers(self, channel_id: Any, db: AsyncSession, page: int = 1, limit: Optional[int] = None) -> PageResult:
        channel = await self._require_actor(channel_id, db, "Channel")
        pipeline = (
            PipelineBuilder("edges")
            .where(target_id=channel.id, kind=EdgeKind.FOLLOW)
            .sort_by("created_at", "desc")
            .join_owner_profile(local_field="source_id", as_field="subscriber")
            .exclude("target_type")
            .build()
        )
        return await pagination_executor.paginate(pipeline, db, page=page, limit=limit)

    async def subscribed_channels(self, subscriber_id: Any, db: AsyncSession, page: int = 1, limit: Optional[int] = None) -> PageResult:
        subscriber = await self._require_actor(subscriber_id, db, "Subscriber")
        pipeline = (
            PipelineBuilder("edges")
            .where(source_id=subscriber.id, kind=EdgeKind.FOLLOW)
            .sort_by("created_at", "desc")
            .join_owner_profile(local_field="target_id", as_field="channel", extra_fields=("cover_image_url",))
            .exclude("target_type")
            .build()
        )
        return await pagination_executor.paginate(pipeline, db, page=page, limit=limit)


relationship_views = RelationshipViews()
