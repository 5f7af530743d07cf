"""
Clipshare ORM Models — Complete data layer.

Actors are owned by the identity collaborator; everything else here is owned
by exactly one actor through ``owner_id``. Edges belong to neither endpoint
and are keyed by (source, target, kind).
"""
from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean, DateTime, Enum, ForeignKey, Index, Integer,
    String, Text, UniqueConstraint, Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clipshare.core.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════════════

class ContentKind(str, enum.Enum):
    VIDEO = "video"
    POST = "post"


class EdgeKind(str, enum.Enum):
    FOLLOW = "follow"
    LIKE = "like"


class TargetType(str, enum.Enum):
    ACTOR = "actor"
    VIDEO = "video"
    POST = "post"
    COMMENT = "comment"


# ═══════════════════════════════════════════════════════════════════════
# Identity (external)
# ═══════════════════════════════════════════════════════════════════════

class Actor(Base):
    __tablename__ = "actors"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    display_name: Mapped[str] = mapped_column(String(256))
    handle: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    cover_image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


# ═══════════════════════════════════════════════════════════════════════
# Core Content Models
# ═══════════════════════════════════════════════════════════════════════

class ContentItem(Base):
    """A video or a short text post."""
    __tablename__ = "content_items"
    __table_args__ = (
        Index("ix_content_owner_kind", "owner_id", "kind"),
        Index("ix_content_created_at", "created_at"),
        Index("ix_content_published", "published"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("actors.id"), nullable=False)
    kind: Mapped[ContentKind] = mapped_column(Enum(ContentKind), nullable=False, default=ContentKind.VIDEO)

    title: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Media collaborator output, never raw bytes
    media_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    duration_seconds: Mapped[float] = mapped_column(default=0.0)

    published: Mapped[bool] = mapped_column(Boolean, default=True)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner: Mapped["Actor"] = relationship("Actor", lazy="raise")


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (
        Index("ix_comments_content", "content_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("actors.id"), nullable=False)
    content_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("content_items.id", ondelete="CASCADE"), nullable=False)
    body: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class Playlist(Base):
    """Actor playlist — ordered, duplicate-free collection of videos."""
    __tablename__ = "playlists"
    __table_args__ = (
        Index("ix_playlists_owner", "owner_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("actors.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(256))
    description: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    items: Mapped[List["PlaylistItem"]] = relationship(
        "PlaylistItem", back_populates="playlist", lazy="raise",
        cascade="all, delete-orphan", order_by="PlaylistItem.position",
    )


class PlaylistItem(Base):
    """Junction: position of a video within a playlist."""
    __tablename__ = "playlist_items"
    __table_args__ = (
        UniqueConstraint("playlist_id", "content_id", name="uq_playlist_items_playlist_content"),
        Index("ix_pi_playlist_pos", "playlist_id", "position"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    playlist_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("playlists.id", ondelete="CASCADE"))
    content_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("content_items.id", ondelete="CASCADE"))
    position: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    playlist: Mapped["Playlist"] = relationship("Playlist", back_populates="items")


# ═══════════════════════════════════════════════════════════════════════
# Social Graph
# ═══════════════════════════════════════════════════════════════════════

class Edge(Base):
    """Directed FOLLOW / LIKE relationship. Created or deleted, never updated."""
    __tablename__ = "edges"
    __table_args__ = (
        UniqueConstraint("source_id", "target_id", "kind", name="uq_edges_source_target_kind"),
        Index("ix_edges_target_kind", "target_id", "kind"),
        Index("ix_edges_source_kind", "source_id", "kind"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    source_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("actors.id"), nullable=False)
    target_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    target_type: Mapped[TargetType] = mapped_column(Enum(TargetType), nullable=False)
    kind: Mapped[EdgeKind] = mapped_column(Enum(EdgeKind), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
