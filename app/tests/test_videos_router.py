"""HTTP contract tests for ``GET /api/videos``."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import build_pipeline, create_app
from app.routers.videos import get_video_feed
from app.schema.video import CachedSnapshot, VideoRecord
from app.services.video_cache import InMemoryVideoCache
from app.services.video_feed import VideoFeedService
from app.services.youtube_client import RemoteFetchFailed

CHANNEL_ID = "UCBUL4M5iMyee-BxCIGrsFhw"
TTL_MS = 60 * 60 * 1000


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_700_000_000_000

    def __call__(self) -> int:
        return self.now


class FailingSource:
    def __init__(self) -> None:
        self.calls = 0

    async def fetch_channel_videos(self, channel_id: str) -> list[VideoRecord]:
        self.calls += 1
        raise RemoteFetchFailed("YouTube search request failed with status 403")


def _videos(*ids: str) -> list[VideoRecord]:
    return [
        VideoRecord(
            id=video_id,
            title=f"Song {video_id}",
            description="",
            thumbnail=f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
            viewCount="12",
            likeCount="3",
        )
        for video_id in ids
    ]


def _client_for(service: VideoFeedService) -> TestClient:
    app = create_app(Settings(cache_backend="memory"))
    app.dependency_overrides[get_video_feed] = lambda: service
    return TestClient(app)


def test_missing_channel_id_returns_400() -> None:
    source = FailingSource()
    cache = InMemoryVideoCache()
    client = _client_for(VideoFeedService(source=source, cache=cache))

    response = client.get("/api/videos")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing channelId"}
    assert source.calls == 0
    assert cache.snapshots == {}


def test_blank_channel_id_returns_400() -> None:
    client = _client_for(VideoFeedService(source=FailingSource(), cache=InMemoryVideoCache()))

    response = client.get("/api/videos", params={"channelId": "   "})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing channelId"}


def test_no_cache_and_upstream_failure_returns_generic_500() -> None:
    client = _client_for(VideoFeedService(source=FailingSource(), cache=InMemoryVideoCache()))

    response = client.get("/api/videos", params={"channelId": CHANNEL_ID})

    assert response.status_code == 500
    assert response.json() == {"error": "Unable to fetch videos and no valid cache found."}
    assert "403" not in response.text


def test_stale_cache_and_upstream_failure_returns_200() -> None:
    clock = FakeClock()
    cache = InMemoryVideoCache(ttl_ms=TTL_MS, clock=clock)
    cache.snapshots[CHANNEL_ID.casefold()] = CachedSnapshot(
        timestamp=clock.now - 2 * TTL_MS,
        videos=_videos("a", "b", "c"),
    )
    client = _client_for(VideoFeedService(source=FailingSource(), cache=cache))

    response = client.get("/api/videos", params={"channelId": CHANNEL_ID})

    assert response.status_code == 200
    body = response.json()
    assert [video["id"] for video in body] == ["a", "b", "c"]
    assert set(body[0]) == {"id", "title", "description", "thumbnail", "viewCount", "likeCount"}


@pytest.fixture
def youtube_http() -> Iterator[tuple[httpx.AsyncClient, list[httpx.Request]]]:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/search"):
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": {"videoId": video_id},
                            "snippet": {
                                "title": f"Song {video_id}",
                                "description": "Sing along",
                                "thumbnails": {"high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"}},
                            },
                        }
                        for video_id in ("new", "older", "gone")
                    ]
                },
            )
        return httpx.Response(
            200,
            json={
                "items": [
                    {"id": "new", "statistics": {"viewCount": "42", "likeCount": "4"}},
                    {"id": "older", "statistics": {"viewCount": "1000"}},
                ]
            },
        )

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    yield http, requests
    asyncio.run(http.aclose())


def test_fetches_from_youtube_then_serves_from_cache(youtube_http) -> None:
    http, requests = youtube_http
    config = Settings(youtube_api_key="dummy-key", cache_backend="memory")
    service = VideoFeedService(source=build_pipeline(http, config), cache=InMemoryVideoCache())
    client = _client_for(service)

    first = client.get("/api/videos", params={"channelId": CHANNEL_ID})
    second = client.get("/api/videos", params={"channelId": CHANNEL_ID})

    assert first.status_code == 200
    assert first.json() == [
        {
            "id": "new",
            "title": "Song new",
            "description": "Sing along",
            "thumbnail": "https://i.ytimg.com/vi/new/hqdefault.jpg",
            "viewCount": "42",
            "likeCount": "4",
        },
        {
            "id": "older",
            "title": "Song older",
            "description": "Sing along",
            "thumbnail": "https://i.ytimg.com/vi/older/hqdefault.jpg",
            "viewCount": "1000",
            "likeCount": "0",
        },
        {
            "id": "gone",
            "title": "Song gone",
            "description": "Sing along",
            "thumbnail": "https://i.ytimg.com/vi/gone/hqdefault.jpg",
            "viewCount": "0",
            "likeCount": "0",
        },
    ]
    assert second.json() == first.json()
    assert [request.url.path.rsplit("/", 1)[-1] for request in requests] == ["search", "videos"]
    assert requests[1].url.params["id"] == "new,older,gone"


def test_ping_and_healthcheck() -> None:
    client = _client_for(VideoFeedService(source=FailingSource(), cache=InMemoryVideoCache()))

    ping = client.get("/api", params={"hello": "world"})
    assert ping.status_code == 200
    assert ping.json()["message"] == "API is working!"
    assert ping.json()["method"] == "GET"
    assert ping.json()["query"] == {"hello": "world"}

    assert client.get("/healthz").json() == {"status": "ok"}
