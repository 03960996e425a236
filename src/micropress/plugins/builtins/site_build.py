"""Built-in plugin that rebuilds the static site after every change.

The build command is spawned and not waited on: the HTTP response never
depends on the build. A missing binary is logged and otherwise ignored.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from micropress.config.models import BuildConfig
from micropress.plugins.hookspecs import hookimpl

logger = logging.getLogger(__name__)


class SiteBuildPlugin:
    """Spawn ``[build] command`` in the site root on lifecycle hooks."""

    def __init__(
        self,
        config: BuildConfig | None = None,
        site_root: Path | None = None,
    ) -> None:
        self._config = config or BuildConfig()
        self._site_root = site_root

    @property
    def _enabled(self) -> bool:
        return bool(self._config.command) and self._site_root is not None

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    @hookimpl
    def post_create(
        self,
        post_type: str,
        post_id: str,
        path: str,
        location: str,
    ) -> None:
        self.trigger(f"create {post_type}/{post_id}")

    @hookimpl
    def post_draft_change(self, path: str, draft: bool) -> None:
        self.trigger(f"{'delete' if draft else 'undelete'} {path}")

    @hookimpl
    def post_media_upload(self, path: str) -> None:
        self.trigger(f"media {path}")

    # ------------------------------------------------------------------
    # Subprocess
    # ------------------------------------------------------------------

    def trigger(self, reason: str) -> None:
        """Start the build command in the background."""
        if not self._enabled:
            return
        try:
            process = subprocess.Popen(  # noqa: S603
                self._config.command,
                cwd=self._site_root,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.warning("Site build failed to start: %s", exc)
            return
        logger.info("Site build started (%s), pid %s", reason, process.pid)
