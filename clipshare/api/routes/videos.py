"""
Clipshare API — Video Routes

Public feed, playback, and owner-only publishing and editing.
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.api.deps import get_caller_id, get_media_uploader, get_optional_caller_id, stash_upload
from clipshare.core.database import get_db
from clipshare.models.models import ContentKind
from clipshare.schemas.schemas import ApiResponse, FeedQuery, ok
from clipshare.services.content.content_service import content_service
from clipshare.services.media.media_gateway import MediaUploader

router = APIRouter(prefix="/videos", tags=["Videos"])


@router.get("", response_model=ApiResponse)
async def list_videos(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    query: Optional[str] = Query(None, max_length=256),
    sort_by: Optional[str] = None,
    sort_type: Optional[str] = None,
    user_id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Published videos, searchable by title/description, optionally for one channel."""
    feed = FeedQuery(
        page=page, limit=limit, query=query, sort_by=sort_by, sort_direction=sort_type, owner_id=user_id,
    )
    result = await content_service.list_feed(feed, db)
    return ok(result, "Videos fetched successfully")


@router.post("", response_model=ApiResponse, status_code=201)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    caller_id: uuid.UUID = Depends(get_caller_id),
    uploader: MediaUploader = Depends(get_media_uploader),
    db: AsyncSession = Depends(get_db),
):
    video = await content_service.publish_video(
        caller_id, title, description, stash_upload(video_file), stash_upload(thumbnail), uploader, db,
    )
    card = await content_service.get_card(video.id, ContentKind.VIDEO, db)
    return ok(card, "Video published successfully", status_code=201)


@router.get("/{video_id}", response_model=ApiResponse)
async def get_video(
    video_id: str,
    caller_id: Optional[uuid.UUID] = Depends(get_optional_caller_id),
    db: AsyncSession = Depends(get_db),
):
    """Fetch a video and count the view."""
    video = await content_service.view_video(video_id, db, viewer_id=caller_id)
    return ok(video, "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse)
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    caller_id: uuid.UUID = Depends(get_caller_id),
    uploader: MediaUploader = Depends(get_media_uploader),
    db: AsyncSession = Depends(get_db),
):
    video = await content_service.update_video(
        caller_id, video_id, db,
        title=title, description=description,
        thumbnail_path=stash_upload(thumbnail), uploader=uploader,
    )
    return ok(video, "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse)
async def delete_video(
    video_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    await content_service.delete_content(caller_id, video_id, ContentKind.VIDEO, db)
    return ok({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse)
async def toggle_publish_status(
    video_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    video = await content_service.toggle_publish(caller_id, video_id, db)
    state = "published" if video["published"] else "unpublished"
    return ok(video, f"Video {state} successfully")
