"""Shared base for services bound to one :class:`Site`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from micropress.infrastructure.site import Site

logger = logging.getLogger(__name__)


class BaseService:
    """Holds the site; subclasses read ``self._site.settings`` and ``self._site.files``."""

    def __init__(self, site: Site) -> None:
        self._site = site

    def _notify(self, hook_name: str, warnings: list[str], **payload: Any) -> None:
        """Fire a lifecycle hook after a successful change.

        The change is already on disk, so a failing plugin is reported as a
        warning on *warnings* and the request still succeeds.
        """
        plugins = self._site.plugins
        if plugins is None:
            return
        hook = getattr(plugins.hook, hook_name)
        try:
            hook(**payload)
        except Exception:
            logger.warning("Plugin hook %s raised", hook_name, exc_info=True)
            warnings.append(f"Plugin hook {hook_name} failed")
