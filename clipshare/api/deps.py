"""
Clipshare API — shared request dependencies.

The identity collaborator authenticates callers upstream and forwards the
trusted actor id in ``X-Actor-Id``; this service never sees credentials.
"""
from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import Header, HTTPException, UploadFile

from clipshare.core.config import get_settings
from clipshare.services.media.media_gateway import LocalMediaUploader, MediaUploader
from clipshare.services.store.repository import parse_id

logger = logging.getLogger(__name__)
settings = get_settings()

_uploader = LocalMediaUploader()


async def get_caller_id(x_actor_id: Optional[str] = Header(None)) -> uuid.UUID:
    if not x_actor_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return parse_id(x_actor_id, "user")


async def get_optional_caller_id(x_actor_id: Optional[str] = Header(None)) -> Optional[uuid.UUID]:
    return parse_id(x_actor_id, "user") if x_actor_id else None


def get_media_uploader() -> MediaUploader:
    return _uploader


def stash_upload(upload: Optional[UploadFile]) -> Optional[str]:
    """Spool a multipart upload to the temp dir and return its local path."""
    if upload is None or not upload.filename:
        return None
    upload_dir = Path(settings.temp_dir) / "uploads"
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / f"{uuid.uuid4().hex}{Path(upload.filename).suffix}"
    with target.open("wb") as out:
        shutil.copyfileobj(upload.file, out)
    logger.debug(f"Stashed upload {upload.filename} -> {target}")
    return str(target)
