"""
Clipshare API — Playlist Routes
"""
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clipshare.api.deps import get_caller_id
from clipshare.core.database import get_db
from clipshare.schemas.schemas import ApiResponse, PlaylistCreate, PlaylistUpdate, ok
from clipshare.services.playlists.playlist_service import playlist_service

router = APIRouter(prefix="/playlists", tags=["Playlists"])


@router.post("", response_model=ApiResponse, status_code=201)
async def create_playlist(
    data: PlaylistCreate,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.create_playlist(caller_id, data.name, data.description, db)
    return ok(playlist, "Playlist created successfully", status_code=201)


@router.get("/user/{user_id}", response_model=ApiResponse)
async def list_user_playlists(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    playlists = await playlist_service.list_user_playlists(user_id, db, page=page, limit=limit)
    return ok(playlists, "User playlists fetched successfully")


@router.get("/{playlist_id}", response_model=ApiResponse)
async def get_playlist(playlist_id: str, db: AsyncSession = Depends(get_db)):
    """Playlist with its videos in playlist order."""
    return ok(await playlist_service.get_playlist(playlist_id, db), "Playlist fetched successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse)
async def update_playlist(
    playlist_id: str,
    data: PlaylistUpdate,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.update_playlist(
        caller_id, playlist_id, db, name=data.name, description=data.description,
    )
    return ok(playlist, "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse)
async def delete_playlist(
    playlist_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    await playlist_service.delete_playlist(caller_id, playlist_id, db)
    return ok({}, "Playlist deleted successfully")


@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse)
async def add_video_to_playlist(
    video_id: str,
    playlist_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.add_video(caller_id, playlist_id, video_id, db)
    return ok(playlist, "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse)
async def remove_video_from_playlist(
    video_id: str,
    playlist_id: str,
    caller_id: uuid.UUID = Depends(get_caller_id),
    db: AsyncSession = Depends(get_db),
):
    playlist = await playlist_service.remove_video(caller_id, playlist_id, video_id, db)
    return ok(playlist, "Video removed from playlist successfully")
