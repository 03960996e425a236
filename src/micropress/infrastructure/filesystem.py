"""Filesystem capability for the site root.

INVARIANT: Files are truth. A post exists iff its markdown file exists;
there is no index to keep in sync.

Pure parsing/rendering lives in :mod:`micropress.domain`. This module does
the actual I/O and path resolution, and refuses any path that would land
outside the site root.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from urllib.parse import unquote, urlsplit

POST_SUFFIX = ".md"


class SiteFiles:
    """Read/write access to files below a single site root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def resolve(self, *parts: str) -> Path:
        """Join *parts* onto the root, rejecting paths that escape it.

        Raises:
            ValueError: If the result is outside the site root.
        """
        result = self.root.joinpath(*parts)
        if not result.resolve().is_relative_to(self.root.resolve()):
            msg = f"Path escapes site root: {result}"
            raise ValueError(msg)
        return result

    def post_path(self, post_type: str, post_id: str) -> Path:
        """``{root}/{type}/{postId}.md``"""
        return self.resolve(post_type, f"{post_id}{POST_SUFFIX}")

    def url_to_path(self, url: str) -> Path:
        """Map a public post URL to its markdown file.

        The origin is dropped and ``.md`` appended to the path, so
        ``https://example.com/h-entry/2022-04-08-2b0a7b`` resolves to
        ``{root}/h-entry/2022-04-08-2b0a7b.md``.

        Raises:
            ValueError: If the URL has no path or escapes the site root.
        """
        path = unquote(urlsplit(url).path).strip("/")
        if not path:
            msg = f"URL has no post path: {url!r}"
            raise ValueError(msg)
        return self.resolve(f"{path}{POST_SUFFIX}")

    def public_path(self, path: Path) -> str:
        """Site-relative URL path (``/img/a.jpg``) for a file under the root."""
        return "/" + path.resolve().relative_to(self.root.resolve()).as_posix()

    # ------------------------------------------------------------------
    # I/O
    # ------------------------------------------------------------------

    @staticmethod
    def ensure_dir(path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def read_text(path: Path) -> str:
        """Read a UTF-8 file. Raises ``FileNotFoundError`` if absent.

        ``newline=""`` keeps line endings exactly as stored.
        """
        with path.open(encoding="utf-8", newline="") as fh:
            return fh.read()

    def write_text(self, path: Path, text: str) -> None:
        self.write_bytes(path, text.encode("utf-8"))

    def write_bytes(self, path: Path, data: bytes) -> None:
        """Write *data* via a temp file in the same directory, then rename.

        Creates parent directories as needed. A failed or interrupted write
        never leaves a truncated file at *path*.
        """
        self.ensure_dir(path.parent)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
