"""
Clipshare API — Subscription Routes
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
from clipshare.services.social.toggle_service import toggle_engine

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/c/{channel_id}", response_model=ApiResponse)
async def toggle_subscription(
    channel_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    outcome = await toggle_engine.toggle_subscription(caller_id, channel_id, db)
    verb = "Subscribed" if outcome.is_present else "Unsubscribed"
    return ok(ToggleResponse(**outcome.to_dict()), f"{verb} successfully")


@router.get("/c/{channel_id}", response_model=ApiResponse)
async def list_channel_subscribers(
    channel_id: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    subscribers = await relationship_views.channel_subscribers(channel_id, db, page=page, limit=limit)
    return ok(subscribers, "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}", response_model=ApiResponse)
async def list_subscribed_channels(
    subscriber_id: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    channels = await relationship_views.subscribed_channels(subscriber_id, db, page=page, limit=limit)
    return ok(channels, "Subscribed channels fetched successfully")
