"""HTTP adapter: envelopes, status codes, and the caller header."""

import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from clipshare.api.deps import get_media_uploader
from clipshare.main import app

API = "/api/v1"


@pytest.fixture
async def client(engine, uploader):
    app.dependency_overrides[get_media_uploader] = lambda: uploader
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http
    app.dependency_overrides.clear()


async def _register(client, handle):
    response = await client.post(f"{API}/actors", json={"display_name": handle.title(), "handle": handle})
    assert response.status_code == 201
    return response.json()["data"]["id"]


def _as(actor_id):
    return {"X-Actor-Id": actor_id}


async def _publish(client, actor_id, title="Clip"):
    response = await client.post(
        f"{API}/videos",
        data={"title": title, "description": "A short clip"},
        files={
            "videoFile": ("clip.mp4", b"\x00\x00video", "video/mp4"),
            "thumbnail": ("clip.jpg", b"\xff\xd8thumb", "image/jpeg"),
        },
        headers=_as(actor_id),
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_publish_and_fetch_video(client):
    alice = await _register(client, "alice")
    video = await _publish(client, alice)

    response = await client.get(f"{API}/videos/{video['id']}")

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert body["status_code"] == 200
    assert body["data"]["view_count"] == 1
    assert body["data"]["owner"]["handle"] == "alice"
    assert body["data"]["duration_seconds"] == 42.5


async def test_feed_envelope_carries_pagination(client):
    alice = await _register(client, "alice")
    for i in range(3):
        await _publish(client, alice, title=f"Clip {i}")

    response = await client.get(f"{API}/videos", params={"limit": 2, "page": 2})

    page = response.json()["data"]
    assert page["total_items"] == 3
    assert page["total_pages"] == 2
    assert page["has_prev_page"] is True
    assert len(page["items"]) == 1


async def test_subscription_toggle_round_trip(client):
    alice = await _register(client, "alice")
    bob = await _register(client, "bob")

    first = await client.post(f"{API}/subscriptions/c/{bob}", headers=_as(alice))
    subscribers = await client.get(f"{API}/subscriptions/c/{bob}")
    second = await client.post(f"{API}/subscriptions/c/{bob}", headers=_as(alice))

    assert first.json()["data"]["is_present"] is True
    assert subscribers.json()["data"]["items"][0]["subscriber"]["handle"] == "alice"
    assert second.json()["data"]["is_present"] is False
    assert second.json()["message"] == "Unsubscribed successfully"


async def test_dashboard_stats(client):
    alice = await _register(client, "alice")
    bob = await _register(client, "bob")
    video = await _publish(client, alice)
    await client.post(f"{API}/likes/toggle/v/{video['id']}", headers=_as(bob))

    response = await client.get(f"{API}/dashboard/stats", headers=_as(alice))

    stats = response.json()["data"]
    assert stats["video_count"] == 1
    assert stats["like_count"] == 1


async def test_liked_videos_view(client):
    alice = await _register(client, "alice")
    bob = await _register(client, "bob")
    video = await _publish(client, alice)
    await client.post(f"{API}/likes/toggle/v/{video['id']}", headers=_as(bob))

    response = await client.get(f"{API}/likes/videos", headers=_as(bob))

    items = response.json()["data"]["items"]
    assert items[0]["video"]["id"] == video["id"]
    assert items[0]["video"]["owner"]["handle"] == "alice"


# =============================================================================
# Error mapping
# =============================================================================


async def test_missing_caller_header(client):
    response = await client.post(f"{API}/posts", json={"content": "hi"})
    assert response.status_code == 401
    assert response.json()["success"] is False


async def test_malformed_id_is_400(client):
    response = await client.get(f"{API}/videos/not-a-uuid")
    body = response.json()
    assert response.status_code == 400
    assert body == {"success": False, "kind": "InvalidInput", "message": "Invalid video ID", "retryable": False}


async def test_unknown_video_is_404(client):
    response = await client.get(f"{API}/videos/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["kind"] == "NotFound"


async def test_self_subscription_is_400(client):
    alice = await _register(client, "alice")
    response = await client.post(f"{API}/subscriptions/c/{alice}", headers=_as(alice))
    assert response.status_code == 400
    assert response.json()["kind"] == "InvalidOperation"


async def test_foreign_delete_is_403(client):
    alice = await _register(client, "alice")
    bob = await _register(client, "bob")
    video = await _publish(client, alice)

    response = await client.delete(f"{API}/videos/{video['id']}", headers=_as(bob))

    assert response.status_code == 403
    assert response.json()["kind"] == "Forbidden"
    assert (await client.get(f"{API}/videos/{video['id']}")).status_code == 200


async def test_duplicate_playlist_add_is_400(client):
    alice = await _register(client, "alice")
    video = await _publish(client, alice)
    created = await client.post(
        f"{API}/playlists", json={"name": "Mine", "description": "All mine"}, headers=_as(alice),
    )
    playlist_id = created.json()["data"]["id"]

    first = await client.patch(f"{API}/playlists/add/{video['id']}/{playlist_id}", headers=_as(alice))
    second = await client.patch(f"{API}/playlists/add/{video['id']}/{playlist_id}", headers=_as(alice))

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["message"] == "Video is already in the playlist"
    playlist = await client.get(f"{API}/playlists/{playlist_id}")
    assert len(playlist.json()["data"]["videos"]) == 1


async def test_request_validation_uses_error_shape(client):
    alice = await _register(client, "alice")
    response = await client.post(f"{API}/playlists", json={"name": "No description"}, headers=_as(alice))
    assert response.status_code == 400
    assert response.json()["kind"] == "InvalidInput"
