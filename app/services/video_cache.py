"""Per-channel snapshot cache with a fixed time-to-live."""

from __future__ import annotations

import asyncio
import logging
import os
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from app.schema.video import CachedSnapshot, VideoRecord

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 60 * 60 * 1000


class CacheUnavailable(RuntimeError):
    """Raised when no readable snapshot exists for a key."""


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class VideoCacheStore(Protocol):
    async def is_fresh(self, key: str) -> bool: ...

    async def read(self, key: str) -> list[VideoRecord]: ...

    async def write(self, key: str, videos: Sequence[VideoRecord]) -> None: ...


class _SnapshotCache(ABC):
    """Freshness logic shared by the concrete stores."""

    def __init__(self, *, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], int] = epoch_millis) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock

    @abstractmethod
    async def _load(self, key: str) -> CachedSnapshot:
        """Return the stored snapshot or raise ``CacheUnavailable``."""

    @abstractmethod
    async def _store(self, key: str, snapshot: CachedSnapshot) -> None:
        """Replace the snapshot stored under ``key``."""

    async def is_fresh(self, key: str) -> bool:
        try:
            snapshot = await self._load(key)
        except CacheUnavailable as exc:
            logger.info("Cache miss for %s: %s", key, exc)
            return False

        age_ms = self._clock() - snapshot.timestamp
        logger.info("Cache age for %s: %.1fs, TTL: %.1fs", key, age_ms / 1000, self._ttl_ms / 1000)
        return age_ms < self._ttl_ms

    async def read(self, key: str) -> list[VideoRecord]:
        snapshot = await self._load(key)
        logger.info("Using cached data for %s (%d videos)", key, len(snapshot.videos))
        return list(snapshot.videos)

    async def write(self, key: str, videos: Sequence[VideoRecord]) -> None:
        snapshot = CachedSnapshot(timestamp=self._clock(), videos=list(videos))
        await self._store(key, snapshot)
        logger.info("Cache written for %s (%d videos)", key, len(snapshot.videos))


class FileVideoCache(_SnapshotCache):
    """Stores one JSON snapshot file per key in a local directory."""

    def __init__(
        self,
        directory: str | Path,
        *,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        super().__init__(ttl_ms=ttl_ms, clock=clock)
        self._directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self._directory / f"videos-{key}.json"

    def _read_file(self, key: str) -> CachedSnapshot:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CacheUnavailable(f"No cache file at {path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read cache file %s: %s", path, exc)
            raise CacheUnavailable(f"Unreadable cache file at {path}") from exc

        try:
            return CachedSnapshot.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Corrupt cache file %s: %s", path, exc)
            raise CacheUnavailable(f"Corrupt cache file at {path}") from exc

    def _write_file(self, key: str, snapshot: CachedSnapshot) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.tmp")
        try:
            tmp_path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp_path, path)
        finally:
            tmp_path.unlink(missing_ok=True)

    async def _load(self, key: str) -> CachedSnapshot:
        return await asyncio.to_thread(self._read_file, key)

    async def _store(self, key: str, snapshot: CachedSnapshot) -> None:
        await asyncio.to_thread(self._write_file, key, snapshot)


class InMemoryVideoCache(_SnapshotCache):
    """Keeps snapshots in process memory; used for tests and local runs."""

    def __init__(self, *, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], int] = epoch_millis) -> None:
        super().__init__(ttl_ms=ttl_ms, clock=clock)
        self.snapshots: dict[str, CachedSnapshot] = {}

    async def _load(self, key: str) -> CachedSnapshot:
        try:
            return self.snapshots[key]
        except KeyError as exc:
            raise CacheUnavailable(f"No cached snapshot for {key}") from exc

    async def _store(self, key: str, snapshot: CachedSnapshot) -> None:
        self.snapshots[key] = snapshot


__all__ = [
    "CacheUnavailable",
    "FileVideoCache",
    "InMemoryVideoCache",
    "VideoCacheStore",
    "epoch_millis",
]
