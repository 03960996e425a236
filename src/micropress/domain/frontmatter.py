"""Frontmatter codec — property maps to and from the metadata block.

On-disk format (stable, shared with documents written by earlier versions)::

    ---
    date: 2022-12-12
    category: ["test1","test2"]
    photo: [{"value":"/img/a.jpg","alt":""}]
    draft: true
    ---

    Body text...

Each line is ``key: value`` where the value is a boolean literal, a bare
scalar, or compact JSON. ``content`` never appears in the block; it is the
body. ``photo`` is always written as an array of ``{value, alt}`` records.

Round-trip law: ``decode(encode(m)) == m`` for any map whose values are
booleans or lists of strings / photo records. A one-element list
holding a number or null is written bare, as older documents store it.
"""

from __future__ import annotations

import json
import re
from typing import Any

from micropress.domain.errors import MalformedDocumentError
from micropress.domain.requests import PropertyMap

DELIMITER = "---"

_DELIMITER_LINE = re.compile(r"^---[ \t]*\r?$", re.MULTILINE)
_SEPARATOR = ": "

# Keys that are never emitted as plain ``key: value`` lines.
_BODY_KEY = "content"
_PHOTO_KEY = "photo"


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _locate_block(text: str) -> tuple[str, int]:
    """Return ``(block_text, end_offset)`` for the first delimited block.

    ``end_offset`` points just past the closing delimiter (before its line
    break), so ``text[end_offset:]`` is the body exactly as stored.
    """
    matches = _DELIMITER_LINE.finditer(text)
    opening = next(matches, None)
    closing = next(matches, None)
    if opening is None or closing is None:
        msg = "Document has no frontmatter block (expected two '---' lines)"
        raise MalformedDocumentError(msg)
    return text[opening.end() : closing.start()], closing.end()


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def decode(text: str) -> PropertyMap:
    """Decode the metadata block of *text* into a property map.

    Raises:
        MalformedDocumentError: If the block is missing or a line is not
            ``key: value``.
    """
    block, _end = _locate_block(text)
    properties: PropertyMap = {}
    for line in block.split("\n"):
        line = line.removesuffix("\r")
        if not line:
            continue
        key, sep, raw = line.partition(_SEPARATOR)
        if not sep:
            if not line.endswith(":"):
                msg = f"Frontmatter line is not 'key: value': {line!r}"
                raise MalformedDocumentError(msg)
            key, raw = line[:-1], ""
        value = _parse_value(raw)
        if isinstance(value, bool | list):
            properties[key] = value
        else:
            properties[key] = [value]
    return properties


def split_document(text: str) -> tuple[PropertyMap, str]:
    """Decode *text* and return ``(properties, rest)``.

    ``rest`` is everything after the closing delimiter, byte-for-byte.
    """
    properties = decode(text)
    _block, end = _locate_block(text)
    return properties, text[end:]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _scalar(value: str) -> str:
    """Render a single string so that decoding gives it back unchanged."""
    if "\n" in value or "\r" in value:
        return _dumps(value)
    try:
        json.loads(value)
    except ValueError:
        return value
    # Would decode as a number, boolean, null, or JSON structure.
    return _dumps(value)


def normalize_photos(values: list[Any]) -> list[dict[str, str]]:
    """Coerce photo entries into ``{value, alt}`` records."""
    photos: list[dict[str, str]] = []
    for raw in values:
        if isinstance(raw, dict):
            photos.append({"value": str(raw.get("value", "")), "alt": str(raw.get("alt", ""))})
        else:
            photos.append({"value": str(raw), "alt": ""})
    return photos


def _render(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return f"{key}{_SEPARATOR}{'true' if value else 'false'}"
    if not isinstance(value, list):
        value = [value]
    if key == _PHOTO_KEY:
        return f"{key}{_SEPARATOR}{_dumps(normalize_photos(value))}"
    if len(value) == 1 and not isinstance(value[0], dict | list):
        (single,) = value
        rendered = _scalar(single) if isinstance(single, str) else _dumps(single)
        return f"{key}{_SEPARATOR}{rendered}"
    return f"{key}{_SEPARATOR}{_dumps(value)}"


def encode(properties: PropertyMap) -> str:
    """Encode *properties* as a delimited metadata block.

    Keys are emitted in map order; ``content`` is skipped. The result has no
    trailing newline.
    """
    lines = [DELIMITER]
    for key, value in properties.items():
        if key == _BODY_KEY:
            continue
        lines.append(_render(key, value))
    lines.append(DELIMITER)
    return "\n".join(lines)
