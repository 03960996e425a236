"""Post identifiers derived from content and creation time.

A post id is ``{YYYY-MM-DD}-{hhh}{ttt}`` where ``hhh`` is the first three hex
chars of the SHA-1 of the post content and ``ttt`` the first three of the
SHA-1 of the creation instant in epoch milliseconds. That gives 16^6 ids per
day; collisions are possible and are handled by the post store, not here.

INVARIANT: The id is both the filename stem and the public URL segment.
Its format is part of the on-disk contract and must not change.
"""

from __future__ import annotations

import hashlib
import re
from datetime import UTC, datetime

POST_ID_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}-[0-9a-f]{6}$")


def checksum(data: str) -> str:
    """Hex SHA-1 digest of *data* encoded as UTF-8."""
    return hashlib.sha1(data.encode("utf-8")).hexdigest()  # noqa: S324


def epoch_millis(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def post_date(now: datetime) -> str:
    """UTC calendar date of *now* as YYYY-MM-DD."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(UTC).strftime("%Y-%m-%d")


def fingerprint(content: str, now: datetime) -> str:
    """Derive the post id for *content* created at *now*.

    Deterministic for a fixed ``(content, now)`` pair.
    """
    content_hash = checksum(content)
    time_hash = checksum(str(epoch_millis(now)))
    return f"{post_date(now)}-{content_hash[:3]}{time_hash[:3]}"


def validate_post_id(post_id: str) -> bool:
    """Check whether *post_id* has the ``YYYY-MM-DD-xxxxxx`` shape."""
    return POST_ID_PATTERN.match(post_id) is not None
