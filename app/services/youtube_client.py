"""Thin async client for the YouTube Data API search and statistics endpoints."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.schema.youtube import SearchItem, SearchResponse, StatisticsResponse, VideoStatistics

logger = logging.getLogger(__name__)

YOUTUBE_API_BASE = "https://www.googleapis.com/youtube/v3"
MAX_PAGE_SIZE = 50

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


class YouTubeAPIError(RuntimeError):
    """Base class for failures talking to the YouTube Data API."""


class MissingCredential(YouTubeAPIError):
    """Raised when no API key is configured."""


class RemoteFetchFailed(YouTubeAPIError):
    """Raised on transport errors or non-success HTTP responses."""


class InvalidRemoteResponse(YouTubeAPIError):
    """Raised when a response body does not match the expected shape."""


def chunked(values: list[str], size: int) -> Iterable[list[str]]:
    for index in range(0, len(values), size):
        yield values[index : index + size]


class YouTubeClient:
    """Issues paginated search and batched statistics requests."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_key: str | None,
        base_url: str = YOUTUBE_API_BASE,
        timeout: float = 10.0,
        page_size: int = MAX_PAGE_SIZE,
        max_results: int = 500,
        stats_batch_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        self._max_results = max(max_results, 0)
        self._stats_batch_size = max(1, min(stats_batch_size, MAX_PAGE_SIZE))

    def _require_key(self) -> str:
        if not self._api_key:
            raise MissingCredential("YouTube API key is missing; set APP_YOUTUBE_API_KEY")
        return self._api_key

    async def _get(self, endpoint: str, params: dict[str, Any], model: type[ResponseModel]) -> ResponseModel:
        url = f"{self._base_url}/{endpoint}"
        try:
            response = await self._http.get(url, params=params, timeout=self._timeout)
        except httpx.HTTPError as exc:
            raise RemoteFetchFailed(f"Unable to contact YouTube Data API ({endpoint})") from exc

        if response.is_error:
            logger.error(
                "YouTube %s request failed with status %s: %s",
                endpoint,
                response.status_code,
                response.text[:500],
            )
            raise RemoteFetchFailed(f"YouTube {endpoint} request failed with status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteFetchFailed(f"YouTube {endpoint} returned a non-JSON body") from exc

        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise InvalidRemoteResponse(f"YouTube {endpoint} response has an unexpected shape: {exc}") from exc

    async def search_video_items(self, channel_id: str) -> list[SearchItem]:
        """Return search results for a channel, newest first, up to the configured cap."""

        api_key = self._require_key()
        items: list[SearchItem] = []
        page_token: str | None = None

        while len(items) < self._max_results:
            params: dict[str, Any] = {
                "part": "snippet",
                "channelId": channel_id,
                "order": "date",
                "type": "video",
                "maxResults": min(self._page_size, self._max_results - len(items)),
                "key": api_key,
            }
            if page_token:
                params["pageToken"] = page_token

            page = await self._get("search", params, SearchResponse)
            items.extend(page.items)
            logger.debug("Fetched search page with %d items (total %d)", len(page.items), len(items))

            if not page.items or not page.nextPageToken or page.nextPageToken == page_token:
                break
            page_token = page.nextPageToken

        return items[: self._max_results]

    async def fetch_statistics(self, video_ids: list[str]) -> dict[str, VideoStatistics]:
        """Return view/like statistics keyed by video id, one request per batch."""

        api_key = self._require_key()
        statistics: dict[str, VideoStatistics] = {}

        for chunk in chunked(video_ids, self._stats_batch_size):
            params = {"part": "statistics", "id": ",".join(chunk), "key": api_key}
            page = await self._get("videos", params, StatisticsResponse)
            for item in page.items:
                statistics[item.id] = item.statistics

        return statistics


__all__ = [
    "YouTubeAPIError",
    "MissingCredential",
    "RemoteFetchFailed",
    "InvalidRemoteResponse",
    "YouTubeClient",
    "chunked",
]
