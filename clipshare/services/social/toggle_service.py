"""
Clipshare Toggle Engine — FOLLOW / LIKE edges as a two-state machine.

State per (source, target, kind):  ABSENT ⇄ PRESENT

There is no update transition. The UNIQUE(source_id, target_id, kind)
constraint on ``edges`` is what keeps concurrent toggles honest:
  - two racing creates: the loser hits the constraint and reports PRESENT
    (any other constraint failure, e.g. an unknown source actor, is raised)
  - two racing deletes: the loser deletes zero rows and reports ABSENT
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.core.database import is_unique_violation, store_errors
from clipshare.core.errors import InvalidInput, InvalidOperation, NotFound
from clipshare.models.models import (
    Actor,
    Comment,
    ContentItem,
    Edge,
    EdgeKind,
    TargetType,
)
from clipshare.services.store.repository import Repository, parse_id

logger = logging.getLogger(__name__)

EDGE_TOGGLES = Counter(
    "clipshare_edge_toggles_total",
    "Edge toggles by kind and resulting state",
    ["kind", "state"],
)

# Which target types each edge kind may point at
ALLOWED_TARGETS = {
    EdgeKind.FOLLOW: (TargetType.ACTOR,),
    EdgeKind.LIKE: (TargetType.VIDEO, TargetType.POST, TargetType.COMMENT),
}


@dataclass(frozen=True)
class ToggleOutcome:
    is_present: bool
    kind: EdgeKind
    target_id: uuid.UUID
    target_type: TargetType

    def to_dict(self) -> dict:
        return {
            "is_present": self.is_present,
            "kind": self.kind.value,
            "target_id": self.target_id,
            "target_type": self.target_type.value,
        }


class ToggleEngine:
    """Flips edge presence idempotently."""

    async def resolve_target(
        self,
        target_id: uuid.UUID,
        allowed: Tuple[TargetType, ...],
        db: AsyncSession,
        noun: str = "Target",
    ) -> TargetType:
        """Find which kind of entity ``target_id`` is, limited to ``allowed``."""
        if TargetType.ACTOR in allowed and await Repository(Actor, db).exists(target_id):
            return TargetType.ACTOR
        if TargetType.VIDEO in allowed or TargetType.POST in allowed:
            item = await Repository(ContentItem, db).find_one(id=target_id)
            if item is not None and TargetType(item.kind.value) in allowed:
                return TargetType(item.kind.value)
        if TargetType.COMMENT in allowed and await Repository(Comment, db).exists(target_id):
            return TargetType.COMMENT
        raise NotFound(f"{noun} not found")

    async def toggle_edge(
        self,
        source_id: Any,
        target_id: Any,
        kind: Any,
        db: AsyncSession,
        allowed: Optional[Tuple[TargetType, ...]] = None,
        noun: str = "Target",
    ) -> ToggleOutcome:
        source_id = parse_id(source_id, "user")
        target_id = parse_id(target_id, noun.lower())
        try:
            kind = EdgeKind(kind)
        except ValueError:
            raise InvalidInput(f"Unknown relationship kind '{kind}'")

        if kind == EdgeKind.FOLLOW and source_id == target_id:
            raise InvalidOperation("You cannot subscribe to your own channel")

        target_type = await self.resolve_target(target_id, allowed or ALLOWED_TARGETS[kind], db, noun=noun)

        edges = Repository(Edge, db, "Edge")
        existing = await edges.find_one(source_id=source_id, target_id=target_id, kind=kind)
        if existing is not None:
            removed = await edges.delete_where(id=existing.id)
            if not removed:
                logger.info(f"Edge {kind.value} {source_id}->{target_id} already removed by a concurrent toggle")
            is_present = False
        else:
            await self._create_edge(source_id, target_id, target_type, kind, db)
            is_present = True

        EDGE_TOGGLES.labels(kind=kind.value, state="present" if is_present else "absent").inc()
        logger.info(
            f"Toggled {kind.value} {source_id}->{target_id} ({target_type.value}): "
            f"{'present' if is_present else 'absent'}"
        )
        return ToggleOutcome(is_present=is_present, kind=kind, target_id=target_id, target_type=target_type)

    async def _create_edge(
        self,
        source_id: uuid.UUID,
        target_id: uuid.UUID,
        target_type: TargetType,
        kind: EdgeKind,
        db: AsyncSession,
    ) -> None:
        edge = Edge(source_id=source_id, target_id=target_id, target_type=target_type, kind=kind)
        try:
            async with store_errors("create edge"):
                async with db.begin_nested():
                    db.add(edge)
                    await db.flush()
        except IntegrityError as e:
            edges = Repository(Edge, db, "Edge")
            if is_unique_violation(e) and await edges.count(source_id=source_id, target_id=target_id, kind=kind):
                # A concurrent toggle inserted the same triple first: the edge is present
                logger.warning(f"Lost create race for {kind.value} {source_id}->{target_id}; edge already present")
                return
            logger.info(f"Edge {kind.value} {source_id}->{target_id} rejected by constraint: {e.orig}")
            if not await Repository(Actor, db).exists(source_id):
                raise NotFound("User not found")
            raise InvalidInput(f"Cannot create {kind.value} edge {source_id}->{target_id}")

    # ── Typed entry points ───────────────────────────────────────────────

    async def toggle_subscription(self, subscriber_id: Any, channel_id: Any, db: AsyncSession) -> ToggleOutcome:
        return await self.toggle_edge(subscriber_id, channel_id, EdgeKind.FOLLOW, db, noun="Channel")

    async def toggle_video_like(self, actor_id: Any, video_id: Any, db: AsyncSession) -> ToggleOutcome:
        return await self.toggle_edge(actor_id, video_id, EdgeKind.LIKE, db, allowed=(TargetType.VIDEO,), noun="Video")

    async def toggle_post_like(self, actor_id: Any, post_id: Any, db: AsyncSession) -> ToggleOutcome:
        return await self.toggle_edge(actor_id, post_id, EdgeKind.LIKE, db, allowed=(TargetType.POST,), noun="Post")

    async def toggle_comment_like(self, actor_id: Any, comment_id: Any, db: AsyncSession) -> ToggleOutcome:
        return await self.toggle_edge(
            actor_id, comment_id, EdgeKind.LIKE, db, allowed=(TargetType.COMMENT,), noun="Comment",
        )


toggle_engine = ToggleEngine()
