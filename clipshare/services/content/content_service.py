"""
Clipshare Content Service — videos and short posts.

Lifecycle:
  publish / create  → owner-only edits (title, body, thumbnail, published flag)
                    → owner-only delete, which cascades:
                        likes on the item and on its comments,
                        its comments, its playlist memberships
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.core.database import store_errors
from clipshare.core.errors import InvalidInput, InvalidOperation, NotFound
from clipshare.models.models import (
    Actor,
    Comment,
    ContentItem,
    ContentKind,
    Edge,
    EdgeKind,
    PlaylistItem,
)
from clipshare.schemas.schemas import FeedQuery, PageResult
from clipshare.services.media.media_gateway import MediaUploader, upload_required
from clipshare.services.ownership.guard import ownership_guard
from clipshare.services.pipeline.builder import PipelineBuilder
from clipshare.services.pipeline.executor import pagination_executor
from clipshare.services.store.repository import Repository, parse_id

logger = logging.getLogger(__name__)

NOUNS = {ContentKind.VIDEO: "Video", ContentKind.POST: "Post"}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def with_engagement(builder: PipelineBuilder) -> PipelineBuilder:
    """Owner profile plus like and comment counts, the standard content card."""
    return (
        builder
        .join_owner_profile()
        .join_child_count("edges", "target_id", "like_count", where={"kind": EdgeKind.LIKE})
        .join_child_count("comments", "content_id", "comment_count")
    )


class ContentService:

    def _repo(self, db: AsyncSession, kind: ContentKind) -> Repository[ContentItem]:
        return Repository(ContentItem, db, NOUNS[kind])

    async def _load(self, content_id: Any, kind: ContentKind, db: AsyncSession) -> ContentItem:
        noun = NOUNS[kind]
        item = await self._repo(db, kind).get(parse_id(content_id, noun.lower()))
        if item.kind != kind:
            raise NotFound(f"{noun} not found")
        return item

    async def _load_owned(self, actor_id: Any, content_id: Any, kind: ContentKind, action: str, db: AsyncSession) -> ContentItem:
        item = await self._load(content_id, kind, db)
        ownership_guard.authorize(parse_id(actor_id, "user"), item, action=action, noun=f"{NOUNS[kind].lower()}s")
        return item

    # ── Create ───────────────────────────────────────────────────────────

    async def publish_video(
        self,
        owner_id: Any,
        title: Optional[str],
        description: Optional[str],
        video_path: Optional[str],
        thumbnail_path: Optional[str],
        uploader: MediaUploader,
        db: AsyncSession,
    ) -> ContentItem:
        title, description = _clean(title), _clean(description)
        if not (title and description):
            raise InvalidInput("Title and description are required")

        video_file = await upload_required(uploader, video_path, "Video file")
        thumbnail = await upload_required(uploader, thumbnail_path, "Thumbnail")

        video = await self._repo(db, ContentKind.VIDEO).create(
            owner_id=parse_id(owner_id, "user"),
            kind=ContentKind.VIDEO,
            title=title,
            body=description,
            media_url=video_file.url,
            thumbnail_url=thumbnail.url,
            duration_seconds=video_file.duration_seconds or 0.0,
            published=True,
        )
        logger.info(f"Video published: {video.id} by {video.owner_id}")
        return video

    async def create_post(self, owner_id: Any, content: Optional[str], db: AsyncSession) -> Dict[str, Any]:
        content = _clean(content)
        if not content:
            raise InvalidInput("Post content is required")
        post = await self._repo(db, ContentKind.POST).create(
            owner_id=parse_id(owner_id, "user"),
            kind=ContentKind.POST,
            body=content,
            published=True,
        )
        logger.info(f"Post created: {post.id} by {post.owner_id}")
        return await self.get_card(post.id, ContentKind.POST, db)

    # ── Read ─────────────────────────────────────────────────────────────

    async def get_card(self, content_id: Any, kind: ContentKind, db: AsyncSession) -> Dict[str, Any]:
        pipeline = with_engagement(
            PipelineBuilder("content_items").where(id=parse_id(content_id, NOUNS[kind].lower()), kind=kind)
        ).build()
        return await pagination_executor.fetch_one(pipeline, db, not_found=f"{NOUNS[kind]} not found")

    async def view_video(self, video_id: Any, db: AsyncSession, viewer_id: Optional[Any] = None) -> Dict[str, Any]:
        """Fetch a video for playback, counting the view.

        Drafts are only visible to their owner.
        """
        video = await self._load(video_id, ContentKind.VIDEO, db)
        viewer = parse_id(viewer_id, "user") if viewer_id is not None else None
        if not video.published and viewer != video.owner_id:
            raise NotFound("Video not found")

        async with store_errors("increment views"):
            await db.execute(
                update(ContentItem)
                .where(ContentItem.id == video.id)
                .values(view_count=ContentItem.view_count + 1)
                .execution_options(synchronize_session=False)
            )
        return await self.get_card(video.id, ContentKind.VIDEO, db)

    async def list_feed(self, feed: FeedQuery, db: AsyncSession) -> PageResult:
        """Public video feed: search, owner filter, sort, publisher profile."""
        builder = PipelineBuilder.from_feed_query("content_items", feed).where(kind=ContentKind.VIDEO)
        pipeline = with_engagement(builder).build()
        return await pagination_executor.paginate(pipeline, db, page=feed.page, limit=feed.limit)

    async def list_user_posts(self, user_id: Any, db: AsyncSession, page: int = 1, limit: Optional[int] = None) -> PageResult:
        user = await Repository(Actor, db, "User").get(parse_id(user_id, "user"))
        pipeline = (
            PipelineBuilder("content_items")
            .owned_by(user.id)
            .where(kind=ContentKind.POST)
            .sort_by("created_at", "desc")
            .join_owner_profile()
            .join_child_count("edges", "target_id", "like_count", where={"kind": EdgeKind.LIKE})
            .exclude("title", "media_url", "thumbnail_url", "duration_seconds", "view_count")
            .build()
        )
        return await pagination_executor.paginate(pipeline, db, page=page, limit=limit)

    # ── Update ───────────────────────────────────────────────────────────

    async def update_video(
        self,
        actor_id: Any,
        video_id: Any,
        db: AsyncSession,
        title: Optional[str] = None,
        description: Optional[str] = None,
        thumbnail_path: Optional[str] = None,
        uploader: Optional[MediaUploader] = None,
    ) -> Dict[str, Any]:
        video = await self._load_owned(actor_id, video_id, ContentKind.VIDEO, "update", db)

        changes: Dict[str, Any] = {}
        if _clean(title):
            changes["title"] = _clean(title)
        if _clean(description):
            changes["body"] = _clean(description)
        if thumbnail_path:
            if uploader is None:
                raise InvalidInput("Thumbnail upload is not available")
            changes["thumbnail_url"] = (await upload_required(uploader, thumbnail_path, "Thumbnail")).url
        if not changes:
            raise InvalidOperation("At least one field (title, description or thumbnail) is required")

        await self._apply(video, changes, db)
        logger.info(f"Video updated: {video.id} fields={sorted(changes)}")
        return await self.get_card(video.id, ContentKind.VIDEO, db)

    async def update_post(self, actor_id: Any, post_id: Any, content: Optional[str], db: AsyncSession) -> Dict[str, Any]:
        post = await self._load_owned(actor_id, post_id, ContentKind.POST, "update", db)
        content = _clean(content)
        if not content:
            raise InvalidOperation("Post content is required")
        await self._apply(post, {"body": content}, db)
        return await self.get_card(post.id, ContentKind.POST, db)

    async def toggle_publish(self, actor_id: Any, video_id: Any, db: AsyncSession) -> Dict[str, Any]:
        video = await self._load_owned(actor_id, video_id, ContentKind.VIDEO, "toggle publish status of", db)
        await self._apply(video, {"published": not video.published}, db)
        logger.info(f"Video {video.id} {'published' if video.published else 'unpublished'}")
        return await self.get_card(video.id, ContentKind.VIDEO, db)

    async def _apply(self, item: ContentItem, changes: Dict[str, Any], db: AsyncSession) -> None:
        for name, value in changes.items():
            setattr(item, name, value)
        async with store_errors("update content"):
            await db.flush()

    # ── Delete ───────────────────────────────────────────────────────────

    async def delete_content(self, actor_id: Any, content_id: Any, kind: ContentKind, db: AsyncSession) -> None:
        item = await self._load_owned(actor_id, content_id, kind, "delete", db)

        async with store_errors("load comment ids"):
            comment_ids = (await db.execute(
                select(Comment.id).where(Comment.content_id == item.id)
            )).scalars().all()

        edges = Repository(Edge, db, "Edge")
        removed_likes = await edges.delete_in("target_id", [item.id, *comment_ids], kind=EdgeKind.LIKE)
        removed_comments = await Repository(Comment, db, "Comment").delete_where(content_id=item.id)
        removed_memberships = await Repository(PlaylistItem, db, "Playlist entry").delete_where(content_id=item.id)
        await self._repo(db, kind).delete(item.id)

        logger.info(
            f"{NOUNS[kind]} deleted: {item.id} (likes={removed_likes}, comments={removed_comments}, "
            f"playlist_entries={removed_memberships})"
        )


content_service = ContentService()
