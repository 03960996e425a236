"""Shared pytest fixtures and test helpers for micropress tests."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from micropress.config.settings import MicropressSettings
from micropress.domain.frontmatter import encode
from micropress.infrastructure.site import Site
from micropress.plugins import PluginManager, hookimpl


ORIGIN = "https://example.com"
FIXED_NOW = datetime(2022, 4, 8, 12, 30, 0, tzinfo=UTC)


class RecordingPlugin:
    """Captures every lifecycle hook call as ``(hook_name, kwargs)``."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    @hookimpl
    def post_create(self, post_type: str, post_id: str, path: str, location: str) -> None:
        self.calls.append(
            (
                "post_create",
                {"post_type": post_type, "post_id": post_id, "path": path, "location": location},
            )
        )

    @hookimpl
    def post_draft_change(self, path: str, draft: bool) -> None:
        self.calls.append(("post_draft_change", {"path": path, "draft": draft}))

    @hookimpl
    def post_media_upload(self, path: str) -> None:
        self.calls.append(("post_media_upload", {"path": path}))


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Temporary site directory."""
    root = tmp_path / "site"
    root.mkdir()
    return root


@pytest.fixture
def settings(site_root: Path, monkeypatch: pytest.MonkeyPatch) -> MicropressSettings:
    """Settings rooted at the temp site, isolated from the real environment."""
    monkeypatch.delenv("MICROPRESS_CONFIG", raising=False)
    return MicropressSettings.from_cli(site_root=site_root)


@pytest.fixture
def recorder() -> RecordingPlugin:
    return RecordingPlugin()


@pytest.fixture
def site(settings: MicropressSettings, recorder: RecordingPlugin) -> Site:
    """Site with a plugin manager that only records hook calls."""
    pm = PluginManager()
    pm.register_plugin(recorder, name="recorder")
    return Site(settings, plugins=pm)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_post(
    root: Path,
    rel_path: str,
    properties: dict[str, Any],
    body: str = "Hello body",
) -> Path:
    """Write a post document the way the post store lays it out."""
    path = root / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes((encode(properties) + "\n\n" + body).encode("utf-8"))
    return path


@pytest.fixture
def _restore_root_logging():
    """CLI invocations reconfigure logging; put the root logger back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
