"""
Clipshare API — Actor Routes

Registration hook for the identity collaborator and public profiles.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.core.database import get_db
from clipshare.schemas.schemas import ActorProfile, ActorRegister, ApiResponse, ok
from clipshare.services.social.actor_directory import actor_directory

router = APIRouter(prefix="/actors", tags=["Actors"])


@router.post("", response_model=ApiResponse, status_code=201)
async def register_actor(data: ActorRegister, db: AsyncSession = Depends(get_db)):
    actor = await actor_directory.register(
        data.display_name, data.handle, db,
        avatar_url=data.avatar_url, cover_image_url=data.cover_image_url,
    )
    return ok(ActorProfile.model_validate(actor), "Actor registered successfully", status_code=201)


@router.get("/{actor_id}", response_model=ApiResponse)
async def get_actor(actor_id: str, db: AsyncSession = Depends(get_db)):
    return ok(await actor_directory.get_profile(actor_id, db), "Actor fetched successfully")
