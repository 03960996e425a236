"""Hook specifications.

Hooks run after the change is on disk and before the response is sent.
Their return values are ignored.
"""

from __future__ import annotations

import pluggy

hookspec = pluggy.HookspecMarker("micropress")
hookimpl = pluggy.HookimplMarker("micropress")


class MicropressHookSpec:
    @hookspec
    def post_create(
        self,
        post_type: str,
        post_id: str,
        path: str,
        location: str,
    ) -> None:
        """A new post was written.

        Args:
            post_type: ``h-entry`` etc.; also the post's directory.
            post_id: The derived ``YYYY-MM-DD-xxxxxx`` id.
            path: Filesystem path of the markdown file.
            location: Public URL returned to the client.
        """

    @hookspec
    def post_draft_change(self, path: str, draft: bool) -> None:
        """``draft`` was set on an existing post (True: deleted, False: restored)."""

    @hookspec
    def post_media_upload(self, path: str) -> None:
        """A media-endpoint upload was stored at site path *path* (``/img/...``)."""
