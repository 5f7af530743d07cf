"""
Clipshare Comment Service — comments on videos and posts.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.core.database import store_errors
from clipshare.core.errors import InvalidInput, InvalidOperation
from clipshare.models.models import Comment, ContentItem, Edge, EdgeKind
from clipshare.schemas.schemas import PageResult
from clipshare.services.ownership.guard import ownership_guard
from clipshare.services.pipeline.builder import PipelineBuilder
from clipshare.services.pipeline.executor import pagination_executor
from clipshare.services.store.repository import Repository, parse_id

logger = logging.getLogger(__name__)


class CommentService:

    def _repo(self, db: AsyncSession) -> Repository[Comment]:
        return Repository(Comment, db, "Comment")

    def _card(self, **filters: Any) -> PipelineBuilder:
        return (
            PipelineBuilder("comments")
            .where(**filters)
            .join_owner_profile()
            .join_child_count("edges", "target_id", "like_count", where={"kind": EdgeKind.LIKE})
        )

    async def get_comment(self, comment_id: Any, db: AsyncSession) -> Dict[str, Any]:
        pipeline = self._card(id=parse_id(comment_id, "comment")).build()
        return await pagination_executor.fetch_one(pipeline, db, not_found="Comment not found")

    async def add_comment(self, actor_id: Any, content_id: Any, body: Optional[str], db: AsyncSession) -> Dict[str, Any]:
        body = body.strip() if body else ""
        if not body:
            raise InvalidInput("Comment content is required")
        target = await Repository(ContentItem, db, "Content").get(parse_id(content_id, "content"))

        comment = await self._repo(db).create(
            owner_id=parse_id(actor_id, "user"), content_id=target.id, body=body,
        )
        logger.info(f"Comment {comment.id} added to {target.kind.value} {target.id}")
        return await self.get_comment(comment.id, db)

    async def update_comment(self, actor_id: Any, comment_id: Any, body: Optional[str], db: AsyncSession) -> Dict[str, Any]:
        comment = await ownership_guard.load_owned(self._repo(db), comment_id, actor_id, action="update", noun="comments")
        body = body.strip() if body else ""
        if not body:
            raise InvalidOperation("Comment content is required")

        comment.body = body
        async with store_errors("update comment"):
            await db.flush()
        return await self.get_comment(comment.id, db)

    async def delete_comment(self, actor_id: Any, comment_id: Any, db: AsyncSession) -> None:
        comment = await ownership_guard.load_owned(self._repo(db), comment_id, actor_id, action="delete", noun="comments")
        likes = await Repository(Edge, db, "Edge").delete_where(target_id=comment.id, kind=EdgeKind.LIKE)
        await self._repo(db).delete(comment.id)
        logger.info(f"Comment deleted: {comment.id} (likes={likes})")

    async def list_comments(self, content_id: Any, db: AsyncSession, page: int = 1, limit: Optional[int] = None) -> PageResult:
        """Comments on one content item, newest first."""
        target = await Repository(ContentItem, db, "Content").get(parse_id(content_id, "content"))
        pipeline = self._card(content_id=target.id).sort_by("created_at", "desc").build()
        return await pagination_executor.paginate(pipeline, db, page=page, limit=limit)


comment_service = CommentService()
