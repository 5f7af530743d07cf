"""
Clipshare actor directory — the identity collaborator's write path.

Actors are created and owned by the identity service; the core only keeps
the profile fields that read views join against.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.core.errors import InvalidInput
from clipshare.models.models import Actor
from clipshare.schemas.schemas import ActorProfile
from clipshare.services.store.repository import Repository

logger = logging.getLogger(__name__)


class ActorDirectory:

    async def register(
        self,
        display_name: str,
        handle: str,
        db: AsyncSession,
        avatar_url: Optional[str] = None,
        cover_image_url: Optional[str] = None,
    ) -> Actor:
        if not display_name or not display_name.strip():
            raise InvalidInput("Display name is required")
        if not handle or not handle.strip():
            raise InvalidInput("Handle is required")

        actor = await Repository(Actor, db, "Actor").create(
            display_name=display_name.strip(),
            handle=handle.strip().lower(),
            avatar_url=avatar_url,
            cover_image_url=cover_image_url,
        )
        logger.info(f"Registered actor {actor.id} (@{actor.handle})")
        return actor

    async def get_profile(self, actor_id: Any, db: AsyncSession) -> ActorProfile:
        actor = await Repository(Actor, db, "User").get(actor_id)
        return ActorProfile.model_validate(actor)


actor_directory = ActorDirectory()
