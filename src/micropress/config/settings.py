"""MicropressSettings — one frozen object built at startup.

Sources, highest priority first:

1. keyword arguments (CLI flags)
2. ``MICROPRESS_*`` environment variables (``__`` for nesting:
   ``MICROPRESS_SERVER__PORT=9000``)
3. ``micropress.toml``
4. defaults on the section models

Nothing reads the environment or the config file after construction; the
object is passed explicitly to :func:`micropress.web.app.create_app`.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from micropress.config.discovery import find_config
from micropress.config.models import (
    BuildConfig,
    MediaConfig,
    MicropubConfig,
    ServerConfig,
    SiteConfig,
)

# Parsed TOML for the settings object currently being built by from_cli().
_toml_data: ContextVar[dict[str, Any] | None] = ContextVar("micropress_toml_data", default=None)


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*, reporting syntax errors as a CLI error."""
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source over an already-parsed ``micropress.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class MicropressSettings(BaseSettings):
    """Everything one Micropub endpoint needs to know.

    Attributes:
        site_root: Where posts and media are written. Defaults to the
            directory holding ``micropress.toml``, else the working directory.
        config_path: The config file that was read, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "MICROPRESS_",
        "env_nested_delimiter": "__",
    }

    site_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    verbose: bool = False
    log_json: bool = False

    site: SiteConfig = Field(default_factory=SiteConfig)
    micropub: MicropubConfig = Field(default_factory=MicropubConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _toml_data.get() or {}),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        site_root: Path | None = None,
        **flags: Any,
    ) -> MicropressSettings:
        """Build settings for a CLI invocation.

        An explicit *config_path* that does not exist is ignored rather than
        searched around. Otherwise the config is discovered from *site_root*
        (or the working directory) upwards.
        """
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(site_root)

        if site_root is None:
            site_root = toml_path.parent if toml_path else Path.cwd()

        token = _toml_data.set(read_toml(toml_path) if toml_path else None)
        try:
            return cls(site_root=site_root, config_path=toml_path, **flags)
        finally:
            _toml_data.reset(token)
