"""
Clipshare Playlist Service — ordered, duplicate-free video collections.

Membership lives in ``playlist_items``; insertion order is the ascending
``position`` and UNIQUE(playlist_id, content_id) rejects duplicates even
when two adds race.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.core.database import store_errors
from clipshare.core.errors import InvalidInput, InvalidOperation, NotFound
from clipshare.models.models import Actor, ContentItem, ContentKind, Playlist, PlaylistItem
from clipshare.schemas.schemas import PageResult
from clipshare.services.ownership.guard import ownership_guard
from clipshare.services.pipeline.builder import PipelineBuilder
from clipshare.services.pipeline.executor import pagination_executor
from clipshare.services.store.repository import Repository, parse_id

logger = logging.getLogger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    return value.strip() or None if value else None


class PlaylistService:

    def _repo(self, db: AsyncSession) -> Repository[Playlist]:
        return Repository(Playlist, db, "Playlist")

    async def _load_owned(self, actor_id: Any, playlist_id: Any, action: str, db: AsyncSession) -> Playlist:
        return await ownership_guard.load_owned(self._repo(db), playlist_id, actor_id, action=action, noun="playlists")

    # ── Create / update / delete ─────────────────────────────────────────

    async def create_playlist(
        self, owner_id: Any, name: Optional[str], description: Optional[str], db: AsyncSession,
    ) -> Dict[str, Any]:
        name, description = _clean(name), _clean(description)
        if not name:
            raise InvalidInput("Playlist name is required")
        if not description:
            raise InvalidInput("Playlist description is required")

        playlist = await self._repo(db).create(
            owner_id=parse_id(owner_id, "user"), name=name, description=description,
        )
        logger.info(f"Playlist created: {playlist.id} '{name}' by {playlist.owner_id}")
        return await self.get_playlist(playlist.id, db)

    async def update_playlist(
        self,
        actor_id: Any,
        playlist_id: Any,
        db: AsyncSession,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        playlist = await self._load_owned(actor_id, playlist_id, "update", db)

        changes = {k: v for k, v in (("name", _clean(name)), ("description", _clean(description))) if v}
        if not changes:
            raise InvalidOperation("At least one field (name or description) is required")

        for field_name, value in changes.items():
            setattr(playlist, field_name, value)
        async with store_errors("update playlist"):
            await db.flush()
        logger.info(f"Playlist updated: {playlist.id} fields={sorted(changes)}")
        return await self.get_playlist(playlist.id, db)

    async def delete_playlist(self, actor_id: Any, playlist_id: Any, db: AsyncSession) -> None:
        playlist = await self._load_owned(actor_id, playlist_id, "delete", db)
        await Repository(PlaylistItem, db, "Playlist entry").delete_where(playlist_id=playlist.id)
        await self._repo(db).delete(playlist.id)
        logger.info(f"Playlist deleted: {playlist.id}")

    # ── Membership ───────────────────────────────────────────────────────

    async def add_video(self, actor_id: Any, playlist_id: Any, video_id: Any, db: AsyncSession) -> Dict[str, Any]:
        playlist_id = parse_id(playlist_id, "playlist")
        video_id = parse_id(video_id, "video")

        playlist = await self._repo(db).get(playlist_id)
        video = await Repository(ContentItem, db, "Video").get(video_id)
        if video.kind != ContentKind.VIDEO:
            raise NotFound("Video not found")
        ownership_guard.authorize(parse_id(actor_id, "user"), playlist, action="add videos to", noun="playlists")

        entries = Repository(PlaylistItem, db, "Playlist entry")
        if await entries.find_one(playlist_id=playlist.id, content_id=video.id) is not None:
            raise InvalidOperation("Video is already in the playlist")

        async with store_errors("next playlist position"):
            last = await db.scalar(
                select(func.max(PlaylistItem.position)).where(PlaylistItem.playlist_id == playlist.id)
            )
        try:
            await entries.create(
                playlist_id=playlist.id,
                content_id=video.id,
                position=0 if last is None else last + 1,
            )
        except InvalidOperation:
            # Unique constraint caught a concurrent add of the same video
            raise InvalidOperation("Video is already in the playlist")

        logger.info(f"Video {video.id} added to playlist {playlist.id}")
        return await self.get_playlist(playlist.id, db)

    async def remove_video(self, actor_id: Any, playlist_id: Any, video_id: Any, db: AsyncSession) -> Dict[str, Any]:
        """Remove a video. Removing one that is not there is a no-op."""
        playlist = await self._load_owned(actor_id, playlist_id, "remove videos from", db)
        removed = await Repository(PlaylistItem, db, "Playlist entry").delete_where(
            playlist_id=playlist.id, content_id=parse_id(video_id, "video"),
        )
        if removed:
            logger.info(f"Video {video_id} removed from playlist {playlist.id}")
        return await self.get_playlist(playlist.id, db)

    # ── Read views ───────────────────────────────────────────────────────

    async def get_playlist(self, playlist_id: Any, db: AsyncSession) -> Dict[str, Any]:
        """Playlist with its videos expanded in playlist order, each with its publisher."""
        video_with_owner = PipelineBuilder("content_items").join_owner_profile().build()
        pipeline = (
            PipelineBuilder("playlists")
            .where(id=parse_id(playlist_id, "playlist"))
            .expand_ids("video_ids", "content_items", as_field="videos", nested=video_with_owner)
            .join_owner_profile()
            .build()
        )
        return await pagination_executor.fetch_one(pipeline, db, not_found="Playlist not found")

    async def list_user_playlists(
        self, user_id: Any, db: AsyncSession, page: int = 1, limit: Optional[int] = None,
    ) -> PageResult:
        user = await Repository(Actor, db, "User").get(parse_id(user_id, "user"))
        pipeline = (
            PipelineBuilder("playlists")
            .owned_by(user.id)
            .sort_by("created_at", "desc")
            .join_owner_profile()
            .join_child_count("playlist_items", "playlist_id", "video_count")
            .exclude("video_ids")
            .build()
        )
        return await pagination_executor.paginate(pipeline, db, page=page, limit=limit)


playlist_service = PlaylistService()
