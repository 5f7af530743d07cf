"""
Clipshare API Schemas — Pydantic v2 models for request/response validation.

Read views are emitted as plain dicts by the pipeline executor; these models
describe the request shapes and the envelopes around them.
"""
from __future__ import annotations

import math
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


# ═══════════════════════════════════════════════════════════════════════
# Envelope
# ═══════════════════════════════════════════════════════════════════════

class ApiResponse(BaseModel):
    status_code: int = 200
    data: Any = None
    message: str = "Success"
    success: bool = True


def ok(data: Any, message: str, status_code: int = 200) -> ApiResponse:
    return ApiResponse(status_code=status_code, data=data, message=message, success=status_code < 400)


# ═══════════════════════════════════════════════════════════════════════
# Pagination
# ═══════════════════════════════════════════════════════════════════════

class PageResult(BaseModel):
    items: List[Dict[str, Any]] = []
    total_items: int = 0
    page: int = 1
    limit: int = 10

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.limit) if self.limit else 0

    @computed_field
    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    @computed_field
    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages


class FeedQuery(BaseModel):
    """Feed-style list request; every field maps to one pipeline builder option."""
    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1)
    query: Optional[str] = Field(None, max_length=256)
    sort_by: Optional[str] = None
    sort_direction: Optional[str] = None
    owner_id: Optional[str] = None
    published_only: bool = True


# ═══════════════════════════════════════════════════════════════════════
# Profiles
# ═══════════════════════════════════════════════════════════════════════

class ActorProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    display_name: str
    handle: str
    avatar_url: Optional[str] = None
    cover_image_url: Optional[str] = None


class ActorRegister(BaseModel):
    display_name: str = Field(..., max_length=256)
    handle: str = Field(..., max_length=64)
    avatar_url: Optional[str] = None
    cover_image_url: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════
# Social graph
# ═══════════════════════════════════════════════════════════════════════

class ToggleResponse(BaseModel):
    is_present: bool
    kind: str
    target_id: uuid.UUID
    target_type: str


# ═══════════════════════════════════════════════════════════════════════
# Content
# ═══════════════════════════════════════════════════════════════════════

class PostCreate(BaseModel):
    content: str = Field(..., max_length=5000)


class PostUpdate(BaseModel):
    content: Optional[str] = Field(None, max_length=5000)


class CommentCreate(BaseModel):
    content: str = Field(..., max_length=5000)


class CommentUpdate(BaseModel):
    content: Optional[str] = Field(None, max_length=5000)


class PlaylistCreate(BaseModel):
    name: str = Field(..., max_length=256)
    description: str = Field(..., max_length=5000)


class PlaylistUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=256)
    description: Optional[str] = Field(None, max_length=5000)


# ═══════════════════════════════════════════════════════════════════════
# Dashboard
# ═══════════════════════════════════════════════════════════════════════

class ChannelStats(BaseModel):
    video_count: int = 0
    total_views: int = 0
    subscriber_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    computed_at: Optional[datetime] = None
