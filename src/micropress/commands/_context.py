"""AppContext — what the root group hands to every subcommand.

Logging is configured once, here. The :class:`Site` (and with it plugin
discovery) is only built when a command actually needs it, so ``--help``
never loads third-party plugins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from micropress.config.logging import configure_logging

if TYPE_CHECKING:
    from starlette.applications import Starlette

    from micropress.config.settings import MicropressSettings
    from micropress.infrastructure.site import Site


class AppContext:
    def __init__(self, settings: MicropressSettings) -> None:
        self.settings = settings
        self._site: Site | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def site(self) -> Site:
        if self._site is None:
            from micropress.infrastructure.site import Site

            site = Site(self.settings)
            site.init_plugins()
            self._site = site
        return self._site

    def asgi_app(self) -> Starlette:
        """The Micropub application bound to this context's site."""
        from micropress.web.app import create_app

        return create_app(self.settings, site=self.site)
