"""
Clipshare Media Gateway — boundary to the media collaborator.

The core hands over a local temporary file and keeps only what comes back:
a durable URL and, for video, a duration. Binary storage, transcoding and
CDN delivery live behind ``MediaUploader`` implementations.
"""
from __future__ import annotations

import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from clipshare.core.config import get_settings
from clipshare.core.errors import InvalidInput, Unavailable

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class MediaAsset:
    url: str
    duration_seconds: float = 0.0


class MediaUploader(Protocol):
    async def upload(self, local_path: str) -> Optional[MediaAsset]:
        ...


class LocalMediaUploader:
    """Moves uploads into a served directory. Development stand-in for a CDN-backed store."""

    def __init__(self, root: Optional[str] = None, base_url: str = "/media"):
        self.root = Path(root or Path(settings.temp_dir) / "media")
        self.base_url = base_url.rstrip("/")

    async def upload(self, local_path: str) -> Optional[MediaAsset]:
        source = Path(local_path)
        if not source.is_file():
            return None
        self.root.mkdir(parents=True, exist_ok=True)
        name = f"{uuid.uuid4().hex}{source.suffix}"
        shutil.move(str(source), self.root / name)
        return MediaAsset(url=f"{self.base_url}/{name}")


async def upload_required(uploader: MediaUploader, local_path: Optional[str], label: str) -> MediaAsset:
    """Upload ``local_path`` or fail with a caller-facing error.

    A missing file or an empty answer from the collaborator is the caller's
    problem (``InvalidInput``); the collaborator blowing up is retryable.
    """
    if not local_path:
        raise InvalidInput(f"{label} is required")
    try:
        asset = await uploader.upload(local_path)
    except OSError as e:
        logger.warning(f"{label} upload failed: {e}")
        raise Unavailable(f"{label} upload failed, please retry") from e
    if asset is None or not asset.url:
        raise InvalidInput(f"{label} upload failed")
    return asset
