"""Utilities for normalising YouTube channel identifiers."""

from __future__ import annotations

import hashlib
import re

SAFE_KEY_REGEX = re.compile(r"^[0-9a-z_-]{1,128}$")


class ChannelResolutionError(ValueError):
    """Raised when a channel identifier is empty after normalisation."""


def normalise_channel_id(raw: str | None) -> str:
    """Return the trimmed identifier used as the upstream ``channelId`` parameter.

    YouTube channel ids are case sensitive, so only surrounding whitespace is
    removed here.
    """

    identifier = (raw or "").strip()
    if not identifier:
        raise ChannelResolutionError("Empty channel identifier")
    return identifier


def cache_key_for(channel_id: str) -> str:
    """Map a channel identifier onto a stable, filesystem-safe cache key.

    The key is the trimmed, case-folded identifier. Keys that would contain
    anything other than ``[0-9a-z_-]`` are replaced with their SHA-256 digest so
    the same logical channel always lands on the same cache entry.
    """

    folded = normalise_channel_id(channel_id).casefold()
    if SAFE_KEY_REGEX.match(folded):
        return folded
    return hashlib.sha256(folded.encode("utf-8")).hexdigest()
