"""
Clipshare API — Post Routes
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.api.deps import get_caller_id
from clipshare.core.database import get_db
from clipshare.models.models import ContentKind
from clipshare.schemas.schemas import ApiResponse, PostCreate, PostUpdate, ok
from clipshare.services.content.content_service import content_service

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.post("", response_model=ApiResponse, status_code=201)
async def create_post(
    data: PostCreate,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    post = await content_service.create_post(caller_id, data.content, db)
    return ok(post, "Post created successfully", status_code=201)


@router.get("/user/{user_id}", response_model=ApiResponse)
async def list_user_posts(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    posts = await content_service.list_user_posts(user_id, db, page=page, limit=limit)
    return ok(posts, "User posts fetched successfully")


@router.patch("/{post_id}", response_model=ApiResponse)
async def update_post(
    post_id: str,
    data: PostUpdate,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    post = await content_service.update_post(caller_id, post_id, data.content, db)
    return ok(post, "Post updated successfully")


@router.delete("/{post_id}", response_model=ApiResponse)
async def delete_post(
    post_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    await content_service.delete_content(caller_id, post_id, ContentKind.POST, db)
    return ok({}, "Post deleted successfully")
