"""Expected shapes of YouTube Data API v3 responses.

Only the fields the feed relies on are declared; anything else upstream sends
is ignored. A missing required field fails validation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SearchItemId(BaseModel):
    videoId: str


class Thumbnail(BaseModel):
    url: str


class Thumbnails(BaseModel):
    high: Thumbnail


class SearchSnippet(BaseModel):
    title: str
    description: str
    thumbnails: Thumbnails


class SearchItem(BaseModel):
    id: SearchItemId
    snippet: SearchSnippet


class SearchResponse(BaseModel):
    items: list[SearchItem]
    nextPageToken: str | None = None


class VideoStatistics(BaseModel):
    viewCount: str = Field(pattern=r"^\d+$")
    likeCount: str = Field("0", pattern=r"^\d+$")


class StatisticsItem(BaseModel):
    id: str
    statistics: VideoStatistics


class StatisticsResponse(BaseModel):
    items: list[StatisticsItem]
