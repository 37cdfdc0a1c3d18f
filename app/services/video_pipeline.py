"""Aggregate search results and statistics into the public video feed."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from app.schema.video import VideoRecord
from app.schema.youtube import SearchItem, VideoStatistics
from app.services.youtube_client import YouTubeClient

logger = logging.getLogger(__name__)

_MISSING_STATISTICS = VideoStatistics(viewCount="0", likeCount="0")


def dedupe_search_items(items: Sequence[SearchItem]) -> list[SearchItem]:
    """Drop repeated video ids, keeping the first occurrence and upstream order."""

    seen: set[str] = set()
    unique: list[SearchItem] = []
    for item in items:
        if item.id.videoId in seen:
            continue
        seen.add(item.id.videoId)
        unique.append(item)
    return unique


def merge_statistics(
    items: Sequence[SearchItem],
    statistics: Mapping[str, VideoStatistics],
) -> list[VideoRecord]:
    """Combine search items with their statistics.

    Items without statistics (deleted or made private between the two calls)
    are kept with zero counts, so the result always has ``len(items)`` entries.
    """

    records: list[VideoRecord] = []
    for item in items:
        video_id = item.id.videoId
        stats = statistics.get(video_id, _MISSING_STATISTICS)
        records.append(
            VideoRecord(
                id=video_id,
                title=item.snippet.title,
                description=item.snippet.description,
                thumbnail=item.snippet.thumbnails.high.url,
                viewCount=stats.viewCount,
                likeCount=stats.likeCount,
            )
        )
    return records


class VideoPipeline:
    """Fetches every video for a channel along with its statistics."""

    def __init__(self, client: YouTubeClient) -> None:
        self._client = client

    async def fetch_channel_videos(self, channel_id: str) -> list[VideoRecord]:
        items = dedupe_search_items(await self._client.search_video_items(channel_id))
        video_ids = [item.id.videoId for item in items]
        statistics = await self._client.fetch_statistics(video_ids)

        missing = len(video_ids) - sum(1 for video_id in video_ids if video_id in statistics)
        if missing:
            logger.info("%d videos for %s had no statistics; defaulting counts to 0", missing, channel_id)

        return merge_statistics(items, statistics)
