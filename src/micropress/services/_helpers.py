"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime
from urllib.parse import urlsplit


def utc_now() -> datetime:
    """Current UTC time (the creation instant for new posts)."""
    return datetime.now(UTC)


def origin_of(url: str) -> str:
    """``https://example.com/micropub?q=config`` -> ``https://example.com``."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"
