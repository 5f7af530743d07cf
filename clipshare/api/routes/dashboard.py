"""
Clipshare API — Dashboard Routes

Stats and video listing for the calling channel.
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.api.deps import get_caller_id
from clipshare.core.database import get_db
from clipshare.schemas.schemas import ApiResponse, ok
from clipshare.services.stats.stats_service import channel_stats_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=ApiResponse)
async def get_channel_stats(caller_id: uuid.UUID = Depends(get_caller_id)):
    stats = await channel_stats_service.channel_stats(caller_id)
    return ok(stats, "Channel stats fetched successfully")


@router.get("/videos", response_model=ApiResponse)
async def get_channel_videos(
    status: str = Query("all", pattern="^(all|published|draft)$"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    videos = await channel_stats_service.channel_videos(caller_id, db, status=status, page=page, limit=limit)
    return ok(videos, "Channel videos fetched successfully")
