"""Request normalizer — three wire encodings, one :class:`CreateRequest`.

- Form / multipart: flat ``name=value`` fields. ``name[]`` appends to the
  list ``name``; ``h`` selects the type; ``content`` becomes the body.
- Multipart file parts named ``photo`` / ``photo[]`` are set aside as
  pending uploads.
- JSON: already ``{"type": [...], "properties": {...}}``.

:func:`finalize` then adds ``date``, ``postId`` and ``h`` exactly once per
create request, whatever the encoding was.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any

from micropress.domain.content import compose_body
from micropress.domain.errors import InvalidRequestError
from micropress.domain.ids import fingerprint, post_date
from micropress.domain.requests import (
    CreateRequest,
    FormBody,
    JsonBody,
    MultipartBody,
    NormalizedCreate,
    PropertyMap,
    RequestBody,
    UploadedFile,
)

logger = logging.getLogger(__name__)

DEFAULT_KIND = "entry"
PHOTO_FIELDS = frozenset({"photo", "photo[]"})

# Transport-level fields that never become post properties.
_RESERVED_FIELDS = frozenset({"h", "content", "access_token", "action"})

# Lowercase kinds only; the kind is also a directory name.
KIND_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")

# Anything that would split a frontmatter line or end the block early.
_UNSAFE_NAME = re.compile(r"[\r\n]|: ")


# ---------------------------------------------------------------------------
# Field access (shared with the action classifier and the handler)
# ---------------------------------------------------------------------------


def get_field(body: RequestBody | None, name: str) -> str | None:
    """Return the first value of a single logical field, or None.

    Form and multipart bodies look up the submitted field; JSON bodies look
    up the top-level key. Non-string JSON values are ignored.
    """
    match body:
        case FormBody(fields=fields) | MultipartBody(fields=fields):
            for key, value in fields:
                if key == name:
                    return value
            return None
        case JsonBody(data=data):
            value = data.get(name)
            return value if isinstance(value, str) else None
        case _:
            return None


def array_key(key: str) -> str | None:
    """``category[]`` -> ``category``; None for keys without a marker."""
    if "[" not in key:
        return None
    return key.split("[", 1)[0]


# ---------------------------------------------------------------------------
# Per-encoding normalizers
# ---------------------------------------------------------------------------


def _check_name(name: str) -> str:
    """Reject property names that cannot be stored as a frontmatter key."""
    if not name or _UNSAFE_NAME.search(name):
        msg = f"Invalid property name: {name!r}"
        raise InvalidRequestError(msg)
    return name


def _check_kind(kind: str) -> str:
    if not KIND_PATTERN.match(kind):
        msg = f"Invalid h value: {kind!r} (expected lowercase letters, digits and dashes)"
        raise InvalidRequestError(msg)
    return kind


def _from_fields(fields: list[tuple[str, str]]) -> CreateRequest:
    kind = DEFAULT_KIND
    content = ""
    properties: PropertyMap = {}

    for key, value in fields:
        if key == "h":
            kind = _check_kind(value or DEFAULT_KIND)
            continue
        if key == "content":
            content = value
            continue
        if key in _RESERVED_FIELDS:
            continue
        clean = array_key(key)
        if clean is None:
            properties[_check_name(key)] = [value]
            continue
        _check_name(clean)
        existing = properties.get(clean)
        if isinstance(existing, list):
            existing.append(value)
        else:
            properties[clean] = [value]

    return CreateRequest(type=f"h-{kind}", properties={"content": [content], **properties})


def normalize_form(body: FormBody) -> NormalizedCreate:
    return NormalizedCreate(request=_from_fields(body.fields))


def normalize_multipart(body: MultipartBody) -> NormalizedCreate:
    """Normalize text fields and collect photo file parts for upload."""
    uploads: list[UploadedFile] = []
    warnings: list[str] = []
    for upload in body.files:
        if upload.field in PHOTO_FIELDS:
            uploads.append(upload)
        else:
            logger.warning("Ignoring unsupported file part %r", upload.field)
            warnings.append(f"Ignored file part {upload.field!r}")
    return NormalizedCreate(request=_from_fields(body.fields), uploads=uploads, warnings=warnings)


def _json_type(raw: Any) -> str:
    if isinstance(raw, list):
        raw = raw[0] if raw else None
    if raw is None:
        return f"h-{DEFAULT_KIND}"
    if not isinstance(raw, str) or not raw.startswith("h-"):
        msg = f"Invalid type: {raw!r}"
        raise InvalidRequestError(msg)
    return f"h-{_check_kind(raw.removeprefix('h-'))}"


def normalize_json(body: JsonBody) -> NormalizedCreate:
    """Normalize a Micropub JSON create request.

    Raises:
        InvalidRequestError: If ``type`` or ``properties`` has the wrong shape.
    """
    data = body.data
    post_type = _json_type(data.get("type"))
    raw_properties = data.get("properties", {})
    if not isinstance(raw_properties, dict):
        msg = "'properties' must be an object"
        raise InvalidRequestError(msg)

    properties: PropertyMap = {}
    for key, value in raw_properties.items():
        if key in ("access_token", "action"):
            continue
        properties[_check_name(str(key))] = list(value) if isinstance(value, list) else [value]
    content = properties.pop("content", None) or [""]

    return NormalizedCreate(
        request=CreateRequest(type=post_type, properties={"content": content, **properties})
    )


def normalize(body: RequestBody | None) -> NormalizedCreate:
    """Dispatch on the body tag. A missing body is an empty form."""
    match body:
        case JsonBody():
            return normalize_json(body)
        case MultipartBody():
            return normalize_multipart(body)
        case FormBody():
            return normalize_form(body)
        case None:
            return normalize_form(FormBody())
    msg = f"Unsupported request body: {type(body).__name__}"
    raise InvalidRequestError(msg)


# ---------------------------------------------------------------------------
# Derived properties
# ---------------------------------------------------------------------------


def finalize(request: CreateRequest, now: datetime) -> CreateRequest:
    """Add ``date``, ``postId`` and ``h`` derived from *request* and *now*."""
    body = compose_body(request.properties.get("content"))
    properties: PropertyMap = {
        **request.properties,
        "date": [post_date(now)],
        "postId": [fingerprint(body, now)],
        "h": [request.kind],
    }
    return request.model_copy(update={"properties": properties})
