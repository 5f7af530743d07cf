"""
Clipshare API — Comment Routes

``/comments/{content_id}`` addresses the thread on a video or post,
``/comments/c/{comment_id}`` a single comment.
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.api.deps import get_caller_id
from clipshare.core.database import get_db
from clipshare.schemas.schemas import ApiResponse, CommentCreate, CommentUpdate, ok
from clipshare.services.comments.comment_service import comment_service

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("/{content_id}", response_model=ApiResponse)
async def list_comments(
    content_id: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    comments = await comment_service.list_comments(content_id, db, page=page, limit=limit)
    return ok(comments, "Comments fetched successfully")


@router.post("/{content_id}", response_model=ApiResponse, status_code=201)
async def add_comment(
    content_id: str,
    data: CommentCreate,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.add_comment(caller_id, content_id, data.content, db)
    return ok(comment, "Comment added successfully", status_code=201)


@router.patch("/c/{comment_id}", response_model=ApiResponse)
async def update_comment(
    comment_id: str,
    data: CommentUpdate,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    comment = await comment_service.update_comment(caller_id, comment_id, data.content, db)
    return ok(comment, "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse)
async def delete_comment(
    comment_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(caller_id, comment_id, db)
    return ok({}, "Comment deleted successfully")
