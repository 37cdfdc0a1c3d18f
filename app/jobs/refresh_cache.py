"""Utility to refresh a channel's cached video snapshot regardless of its age."""

from __future__ import annotations

import asyncio

import httpx

from app.core.config import Settings, settings
from app.main import build_cache, build_pipeline
from app.services.channel_resolver import ChannelResolutionError, cache_key_for, normalise_channel_id
from app.services.youtube_client import YouTubeAPIError


async def refresh_cache(channel_id: str, config: Settings = settings) -> int:
    try:
        channel_id = normalise_channel_id(channel_id)
    except ChannelResolutionError as exc:
        print(f"Invalid channel id {channel_id!r}: {exc}")
        return 1

    async with httpx.AsyncClient(timeout=config.http_timeout_seconds) as http:
        pipeline = build_pipeline(http, config)
        try:
            videos = await pipeline.fetch_channel_videos(channel_id)
        except YouTubeAPIError as exc:
            print(f"Refresh failed for {channel_id}: {exc}")
            return 1

    try:
        await build_cache(config).write(cache_key_for(channel_id), videos)
    except OSError as exc:
        print(f"Unable to write cache for {channel_id}: {exc}")
        return 1

    print(f"Cached {len(videos)} videos for {channel_id}.")
    return 0


if __name__ == "__main__":
    import sys

    if len(sys.argv) != 2:
        print("Usage: python -m app.jobs.refresh_cache <CHANNEL_ID>")
        sys.exit(1)

    sys.exit(asyncio.run(refresh_cache(sys.argv[1])))
