"""
Shared fixtures for Clipshare tests.

Every test gets its own SQLite file, bound into the module-level engine and
session factory, so services that open their own sessions see the same data.
"""
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

_WORKDIR = tempfile.mkdtemp(prefix="clipshare-tests-")
os.environ.setdefault("CLIPSHARE_DATABASE_URL_OVERRIDE", f"sqlite+aiosqlite:///{_WORKDIR}/bootstrap.db")
os.environ.setdefault("CLIPSHARE_TEMP_DIR", _WORKDIR)

import pytest

from clipshare.core import database
from clipshare.models.models import ContentItem, ContentKind
from clipshare.services.media.media_gateway import MediaAsset
from clipshare.services.social.actor_directory import actor_directory
from clipshare.services.store.repository import Repository

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def engine(tmp_path):
    test_engine = database.configure_engine(f"sqlite+aiosqlite:///{tmp_path}/clipshare.db")
    await database.init_db()
    yield test_engine
    await database.dispose_db()


@pytest.fixture
async def db(engine):
    async with database.async_session_factory() as session:
        yield session
        await session.rollback()


# =============================================================================
# Actors and content
# =============================================================================


@pytest.fixture
async def alice(db):
    return await actor_directory.register("Alice Example", "alice", db, avatar_url="https://cdn.test/alice.png")


@pytest.fixture
async def bob(db):
    return await actor_directory.register("Bob Example", "bob", db)


@pytest.fixture
def make_video(db):
    """Insert a video directly, spacing ``created_at`` by ``index`` minutes."""

    async def _make(owner, index=0, **fields):
        values = {
            "owner_id": owner.id,
            "kind": ContentKind.VIDEO,
            "title": f"Video {index}",
            "body": f"Description {index}",
            "media_url": f"https://cdn.test/v{index}.mp4",
            "thumbnail_url": f"https://cdn.test/t{index}.jpg",
            "duration_seconds": 60.0,
            "created_at": BASE_TIME + timedelta(minutes=index),
        }
        values.update(fields)
        return await Repository(ContentItem, db, "Video").create(**values)

    return _make


# =============================================================================
# Media collaborator
# =============================================================================


class FakeUploader:
    """Records uploads and answers with a CDN-looking URL."""

    def __init__(self, fail_with=None, answer_none=False):
        self.uploaded = []
        self.fail_with = fail_with
        self.answer_none = answer_none

    async def upload(self, local_path):
        if self.fail_with is not None:
            raise self.fail_with
        self.uploaded.append(local_path)
        if self.answer_none:
            return None
        return MediaAsset(url=f"https://cdn.test/{Path(local_path).name}", duration_seconds=42.5)


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def make_uploader():
    return FakeUploader
