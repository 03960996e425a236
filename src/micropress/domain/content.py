"""Post body composition and full-document rendering.

Pure helpers; file I/O lives in :mod:`micropress.infrastructure.filesystem`.
"""

from __future__ import annotations

from typing import Any

from micropress.domain.frontmatter import encode
from micropress.domain.requests import PropertyMap

LINE_BREAK = "<br>"

# Separates the metadata block from the body in newly written posts.
BODY_SEPARATOR = "\n\n"


def _fragment_text(fragment: Any) -> str:
    if isinstance(fragment, dict):
        return str(fragment.get("html") or fragment.get("value") or "")
    return "" if fragment is None else str(fragment)


def compose_body(content: Any) -> str:
    """Turn the ``content`` property into body text.

    Plain strings are used verbatim. If any fragment is a structured
    ``{"html": ...}`` / ``{"value": ...}`` object the fragments are joined
    with ``<br>``.
    """
    if isinstance(content, bool) or content is None:
        return ""
    if not isinstance(content, list):
        content = [content]
    texts = [_fragment_text(fragment) for fragment in content]
    if any(isinstance(fragment, dict) for fragment in content):
        return LINE_BREAK.join(texts)
    return "\n".join(texts)


def render_post(properties: PropertyMap) -> str:
    """Render a complete post document: metadata block, blank line, body."""
    return encode(properties) + BODY_SEPARATOR + compose_body(properties.get("content"))


def body_from_rest(rest: str) -> str:
    """Strip the line break and blank line that follow the closing delimiter."""
    for _ in range(2):
        if rest.startswith("\r\n"):
            rest = rest[2:]
        elif rest.startswith("\n"):
            rest = rest[1:]
    return rest
