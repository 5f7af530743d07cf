"""
Clipshare Ownership Guard — "actor A must own entity E" before any write.

Stateless; applied by every mutating service method on content items,
playlists and comments.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Protocol

from clipshare.core.errors import Forbidden
from clipshare.services.store.repository import ModelT, Repository, parse_id

logger = logging.getLogger(__name__)


class Owned(Protocol):
    owner_id: uuid.UUID


class OwnershipGuard:
    """Capability check shared by all owned entity types."""

    def authorize(self, actor_id: uuid.UUID, entity: Owned, action: str = "modify", noun: str = "") -> None:
        if entity.owner_id != actor_id:
            noun = noun or f"{type(entity).__name__.lower()}s"
            logger.info(f"Ownership check failed: actor={actor_id} action={action} {noun}")
            raise Forbidden(f"You can only {action} your own {noun}")

    async def load_owned(
        self,
        repo: Repository[ModelT],
        entity_id: Any,
        actor_id: Any,
        action: str = "modify",
        noun: str = "",
    ) -> ModelT:
        """Fetch an entity (``NotFound``) and require ``actor_id`` to own it (``Forbidden``)."""
        entity = await repo.get(entity_id)
        self.authorize(parse_id(actor_id, "actor"), entity, action=action, noun=noun)
        return entity


ownership_guard = OwnershipGuard()
