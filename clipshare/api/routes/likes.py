"""
Clipshare API — Like Routes

Each toggle flips the caller's LIKE edge on one target and reports the new state.
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.api.deps import get_caller_id
from clipshare.core.database import get_db
from clipshare.schemas.schemas import ApiResponse, ToggleResponse, ok
from clipshare.services.social.relationship_views import relationship_views
from clipshare.services.social.toggle_service import ToggleOutcome, toggle_engine

router = APIRouter(prefix="/likes", tags=["Likes"])


def _liked(outcome: ToggleOutcome, noun: str) -> ApiResponse:
    verb = "liked" if outcome.is_present else "unliked"
    return ok(ToggleResponse(**outcome.to_dict()), f"{noun} {verb} successfully")


@router.post("/toggle/v/{video_id}", response_model=ApiResponse)
async def toggle_video_like(
    video_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    return _liked(await toggle_engine.toggle_video_like(caller_id, video_id, db), "Video")


@router.post("/toggle/p/{post_id}", response_model=ApiResponse)
async def toggle_post_like(
    post_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    return _liked(await toggle_engine.toggle_post_like(caller_id, post_id, db), "Post")


@router.post("/toggle/c/{comment_id}", response_model=ApiResponse)
async def toggle_comment_like(
    comment_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    return _liked(await toggle_engine.toggle_comment_like(caller_id, comment_id, db), "Comment")


@router.get("/videos", response_model=ApiResponse)
async def list_liked_videos(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    videos = await relationship_views.liked_videos(caller_id, db, page=page, limit=limit)
    return ok(videos, "Liked videos fetched successfully")
