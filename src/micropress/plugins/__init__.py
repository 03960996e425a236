"""Lifecycle hooks for extensions.

A plugin is any object with ``@hookimpl``-marked methods named after the
hooks in :mod:`micropress.plugins.hookspecs`; it is picked up from the
``micropress.plugins`` entry-point group. A raising hook becomes a
warning on the service result.
"""

from micropress.plugins.hookspecs import hookimpl
from micropress.plugins.manager import PluginManager

__all__ = ["PluginManager", "hookimpl"]
