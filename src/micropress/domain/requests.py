"""Request shapes — the tagged body union and the canonical create request.

Transports decode whatever arrived on the wire into exactly one of
:class:`FormBody`, :class:`MultipartBody` or :class:`JsonBody`. Everything
downstream branches on that tag instead of sniffing content types again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

# Property name -> ordered values. Values are strings or photo records
# ({"value": ..., "alt": ...}); sentinel flags such as ``draft`` are bare bools.
PropertyValue = list[Any] | bool
PropertyMap = dict[str, PropertyValue]


class Action(StrEnum):
    """What a POST to the Micropub endpoint asks for."""

    CREATE = "create"
    DELETE = "delete"
    UNDELETE = "undelete"


# ---------------------------------------------------------------------------
# Tagged request body union
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UploadedFile:
    """A binary part of a multipart request."""

    field: str
    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class FormBody:
    """``application/x-www-form-urlencoded`` fields in submission order."""

    fields: list[tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class MultipartBody:
    """``multipart/form-data``: text fields plus binary file parts."""

    fields: list[tuple[str, str]] = field(default_factory=list)
    files: list[UploadedFile] = field(default_factory=list)


@dataclass(frozen=True)
class JsonBody:
    """``application/json`` object."""

    data: dict[str, Any] = field(default_factory=dict)


RequestBody = FormBody | MultipartBody | JsonBody


# ---------------------------------------------------------------------------
# Request / response envelopes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MicropubRequest:
    """Transport-neutral view of one HTTP request.

    ``headers`` keys are lower-cased by the transport adapter.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: RequestBody | None = None

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())


@dataclass(frozen=True)
class MicropubResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


# ---------------------------------------------------------------------------
# Canonical create request
# ---------------------------------------------------------------------------


class CreateRequest(BaseModel):
    """A normalized create request.

    ``type`` is always ``h-<kind>``. ``properties["content"]`` is always
    present, ``[""]`` when the client sent nothing.
    """

    model_config = {"frozen": True}

    type: str = "h-entry"
    properties: PropertyMap = Field(default_factory=lambda: {"content": [""]})

    @property
    def kind(self) -> str:
        """The type without its ``h-`` prefix (``entry`` for ``h-entry``)."""
        return self.type.removeprefix("h-")


@dataclass(frozen=True)
class NormalizedCreate:
    """Output of the normalizer: the request plus photo files still to upload."""

    request: CreateRequest
    uploads: list[UploadedFile] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
