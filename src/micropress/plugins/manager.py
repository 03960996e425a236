"""Plugin registry for lifecycle hooks.

Third-party plugins are installed packages exposing an entry point in the
``micropress.plugins`` group. Built-ins are registered by
:meth:`micropress.infrastructure.site.Site.init_plugins`.
"""

from __future__ import annotations

import inspect
import logging

import pluggy

from micropress.plugins.hookspecs import MicropressHookSpec

PROJECT_NAME = "micropress"
ENTRY_POINT_GROUP = "micropress.plugins"

logger = logging.getLogger(__name__)


class PluginManager(pluggy.PluginManager):
    """pluggy manager preloaded with the micropress hook specifications."""

    def __init__(self) -> None:
        super().__init__(PROJECT_NAME)
        self.add_hookspecs(MicropressHookSpec)
        self._discovered = False

    @property
    def is_loaded(self) -> bool:
        """True once entry-point discovery has run."""
        return self._discovered

    def discover_and_load(self) -> list[str]:
        """Load entry-point plugins and return every registered plugin name."""
        count = self.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        logger.debug("Loaded %d entry-point plugin(s)", count)
        self._instantiate_classes()
        self._discovered = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        plugin_name = name or type(plugin).__name__
        self.register(plugin, name=plugin_name)
        logger.debug("Registered plugin: %s", plugin_name)

    def list_plugin_names(self) -> list[str]:
        return [self.get_name(plugin) or repr(plugin) for plugin in self.get_plugins()]

    def _instantiate_classes(self) -> None:
        """Swap plugin classes registered from entry points for instances.

        Hooks on a bare class would be called without ``self``.
        """
        for name, plugin in self.list_name_plugin():
            if not inspect.isclass(plugin):
                continue
            self.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning("Dropping plugin %s: constructor failed", name, exc_info=True)
                continue
            self.register(instance, name=name)
