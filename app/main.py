"""FastAPI app entry point."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import Settings, settings
from app.routers import videos
from app.services.video_cache import FileVideoCache, InMemoryVideoCache, VideoCacheStore
from app.services.video_feed import MissingChannelId, NoDataAvailable, VideoFeedService
from app.services.video_pipeline import VideoPipeline
from app.services.youtube_client import YouTubeClient


def build_cache(config: Settings) -> VideoCacheStore:
    ttl_ms = config.cache_ttl_seconds * 1000
    if config.cache_backend == "memory":
        return InMemoryVideoCache(ttl_ms=ttl_ms)
    return FileVideoCache(config.cache_dir, ttl_ms=ttl_ms)


def build_pipeline(http: httpx.AsyncClient, config: Settings) -> VideoPipeline:
    client = YouTubeClient(
        http,
        api_key=config.youtube_api_key,
        base_url=config.youtube_api_base,
        timeout=config.http_timeout_seconds,
        page_size=config.search_page_size,
        max_results=config.max_search_results,
        stats_batch_size=config.stats_batch_size,
    )
    return VideoPipeline(client)


def create_app(config: Settings = settings) -> FastAPI:
    """Build FastAPI application."""

    logging.basicConfig(level=config.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with httpx.AsyncClient(timeout=config.http_timeout_seconds) as http:
            app.state.video_feed = VideoFeedService(
                source=build_pipeline(http, config),
                cache=build_cache(config),
            )
            yield

    app = FastAPI(title="Little Lullabies Videos", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(videos.router)

    @app.exception_handler(MissingChannelId)
    async def _missing_channel(request: Request, exc: MissingChannelId) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(NoDataAvailable)
    async def _no_data(request: Request, exc: NoDataAvailable) -> JSONResponse:
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.get("/healthz", tags=["health"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
