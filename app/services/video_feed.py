"""Cache-or-fetch policy behind ``GET /api/videos``."""

from __future__ import annotations

import logging
from typing import Protocol

from app.schema.video import VideoRecord
from app.services.channel_resolver import ChannelResolutionError, cache_key_for, normalise_channel_id
from app.services.video_cache import CacheUnavailable, VideoCacheStore

logger = logging.getLogger(__name__)

MISSING_CHANNEL_MESSAGE = "Missing channelId"
NO_DATA_MESSAGE = "Unable to fetch videos and no valid cache found."


class MissingChannelId(ValueError):
    """Raised when the request carries no channel identifier."""

    def __init__(self) -> None:
        super().__init__(MISSING_CHANNEL_MESSAGE)


class NoDataAvailable(RuntimeError):
    """Raised when the refresh failed and no snapshot can be served instead."""

    def __init__(self) -> None:
        super().__init__(NO_DATA_MESSAGE)


class VideoSource(Protocol):
    async def fetch_channel_videos(self, channel_id: str) -> list[VideoRecord]: ...


class VideoFeedService:
    """Serves a channel's videos from cache, refreshing when the snapshot expires.

    When a refresh fails, any previous snapshot for the channel is served
    regardless of its age; only when none exists does the request fail.
    """

    def __init__(self, *, source: VideoSource, cache: VideoCacheStore) -> None:
        self._source = source
        self._cache = cache

    async def get_videos(self, raw_channel_id: str | None) -> list[VideoRecord]:
        try:
            channel_id = normalise_channel_id(raw_channel_id)
        except ChannelResolutionError as exc:
            raise MissingChannelId() from exc

        key = cache_key_for(channel_id)
        logger.info("Requested channel: %s", channel_id)

        if await self._cache.is_fresh(key):
            try:
                return await self._cache.read(key)
            except CacheUnavailable:
                logger.warning("Fresh cache for %s vanished before read; refreshing", channel_id)

        try:
            videos = await self._source.fetch_channel_videos(channel_id)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to refresh videos for channel %s", channel_id)
            return await self._fallback(key, channel_id)

        try:
            await self._cache.write(key, videos)
        except OSError:
            logger.exception("Failed to write cache for channel %s", channel_id)

        return videos

    async def _fallback(self, key: str, channel_id: str) -> list[VideoRecord]:
        try:
            videos = await self._cache.read(key)
        except CacheUnavailable as exc:
            logger.error("No fallback cache for channel %s: %s", channel_id, exc)
            raise NoDataAvailable() from exc

        logger.warning("Serving stale cache for channel %s (%d videos)", channel_id, len(videos))
        return videos
