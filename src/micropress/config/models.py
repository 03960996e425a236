"""Config file sections.

Every field has a default, so ``micropress.toml`` only lists overrides and a
site can run with no config file at all.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class _Section(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}


class SiteConfig(_Section):
    """``[site]``"""

    # Origin used in Location headers; None: the request's own origin.
    origin: str | None = None

    @field_validator("origin")
    @classmethod
    def _absolute_origin(cls, value: str | None) -> str | None:
        if value is not None and not value.startswith(("http://", "https://")):
            msg = f"origin must be an http(s) URL, got {value!r}"
            raise ValueError(msg)
        return value


class MicropubConfig(_Section):
    """``[micropub]`` endpoint paths and the ``q=syndicate-to`` answer."""

    endpoint: str = "/micropub"
    media_endpoint: str = "/micropub/upload-media"
    # [{uid = "...", name = "..."}, ...]
    syndicate_to: list[dict[str, str]] = Field(default_factory=list)

    @field_validator("endpoint", "media_endpoint")
    @classmethod
    def _rooted_path(cls, value: str) -> str:
        if not value.startswith("/"):
            msg = f"endpoint paths must start with '/', got {value!r}"
            raise ValueError(msg)
        return value


class MediaConfig(_Section):
    """``[media]``: where uploads go and how they are named."""

    directory: str = "img"
    naming: Literal["preserve", "mime"] = "preserve"

    @field_validator("directory")
    @classmethod
    def _relative_directory(cls, value: str) -> str:
        path = PurePosixPath(value)
        if path.is_absolute() or ".." in path.parts or not path.parts:
            msg = f"media directory must be relative to the site root, got {value!r}"
            raise ValueError(msg)
        return value


class BuildConfig(_Section):
    """``[build]``: argv of the site build; empty disables rebuilds."""

    command: list[str] = Field(default_factory=list)


class ServerConfig(_Section):
    """``[server]``"""

    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    # Built site served on every other path, relative to the site root.
    static_dir: str | None = "_site"
