"""Site — the single dependency injected into every service.

Bundles the frozen settings, the filesystem capability rooted at
``settings.site_root``, and the plugin manager used for lifecycle hooks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from micropress.infrastructure.filesystem import SiteFiles

if TYPE_CHECKING:
    from pathlib import Path

    from micropress.config.settings import MicropressSettings
    from micropress.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Site:
    """A site root plus the configuration that governs writes to it."""

    def __init__(
        self,
        settings: MicropressSettings,
        *,
        plugins: PluginManager | None = None,
    ) -> None:
        self.settings = settings
        self.files = SiteFiles(settings.site_root)
        self.plugins = plugins

    @property
    def root(self) -> Path:
        return self.files.root

    def init_plugins(self, *, discover: bool = True) -> PluginManager:
        """Create the plugin manager and register built-in plugins."""
        from micropress.plugins.builtins.site_build import SiteBuildPlugin
        from micropress.plugins.manager import PluginManager

        pm = PluginManager()
        if discover:
            try:
                pm.discover_and_load()
            except Exception:
                logger.warning("Plugin discovery failed", exc_info=True)
        pm.register_plugin(
            SiteBuildPlugin(config=self.settings.build, site_root=self.settings.site_root),
            name="site-build",
        )
        self.plugins = pm
        return pm
