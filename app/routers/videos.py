"""API endpoints exposing a channel's video feed."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from app.schema.video import ErrorResponse, VideoRecord
from app.services.video_feed import VideoFeedService

router = APIRouter(prefix="/api", tags=["videos"])


def get_video_feed(request: Request) -> VideoFeedService:
    """FastAPI dependency returning the service built at startup."""

    return request.app.state.video_feed


@router.get("", tags=["health"])
async def ping(request: Request) -> dict[str, Any]:
    return {
        "message": "API is working!",
        "method": request.method,
        "query": dict(request.query_params),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get(
    "/videos",
    response_model=list[VideoRecord],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def list_channel_videos(
    channel_id: str | None = Query(None, alias="channelId"),
    feed: VideoFeedService = Depends(get_video_feed),
) -> list[VideoRecord]:
    return await feed.get_videos(channel_id)
