"""Pydantic models for the public video feed."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class VideoRecord(BaseModel):
    """A single channel video as served to the website."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    thumbnail: str
    viewCount: str
    likeCount: str


class CachedSnapshot(BaseModel):
    """All videos for one channel captured at ``timestamp`` (epoch milliseconds)."""

    timestamp: int
    videos: list[VideoRecord]


class ErrorResponse(BaseModel):
    error: str
