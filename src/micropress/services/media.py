"""MediaService — store uploaded files under the media directory.

Two naming strategies (``[media] naming``):

- ``preserve``: ``{prefix}-{original basename}``
- ``mime``: ``{prefix}-{original stem}{extension for the declared MIME type}``

Without a prefix the name is just the original basename (or stem plus
extension). Re-uploading the same name overwrites the previous file.
"""

from __future__ import annotations

import logging
import mimetypes
import re
from pathlib import PurePosixPath

from micropress.domain.requests import UploadedFile
from micropress.services.base import BaseService
from micropress.services.result import ServiceResult

logger = logging.getLogger(__name__)

MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/avif": ".avif",
    "image/svg+xml": ".svg",
    "video/mp4": ".mp4",
    "audio/mpeg": ".mp3",
}

_UNSAFE_CHARS = re.compile(r"[^\w.\-]+")
_FALLBACK_NAME = "upload"


def safe_basename(filename: str) -> str:
    """Strip directories and unsafe characters from a client-supplied name."""
    name = PurePosixPath(filename.replace("\\", "/")).name
    name = _UNSAFE_CHARS.sub("-", name).strip(".-")
    return name or _FALLBACK_NAME


def extension_for(content_type: str) -> str:
    """File extension for a MIME type; empty when unknown."""
    base = content_type.split(";", 1)[0].strip().lower()
    return MIME_EXTENSIONS.get(base) or mimetypes.guess_extension(base) or ""


class MediaService(BaseService):
    """Writes media files and returns their public paths."""

    def media_name(self, filename: str, content_type: str, prefix: str | None = None) -> str:
        name = safe_basename(filename)
        if self._site.settings.media.naming == "mime":
            ext = extension_for(content_type)
            if ext:
                name = f"{PurePosixPath(name).stem}{ext}"
        return f"{prefix}-{name}" if prefix else name

    def store(self, upload: UploadedFile, prefix: str | None = None) -> ServiceResult:
        """Write *upload* and return ``data={"path": "/img/..."}``."""
        op = "store_media"
        name = self.media_name(upload.filename, upload.content_type, prefix)
        files = self._site.files
        try:
            target = files.resolve(self._site.settings.media.directory, name)
            files.write_bytes(target, upload.data)
        except ValueError as exc:
            return ServiceResult.failure(op, "INVALID_REQUEST", str(exc))
        except OSError as exc:
            logger.error("Failed to write media %s: %s", name, exc)
            return ServiceResult.failure(op, "IO_ERROR", f"Could not store {name}")

        path = files.public_path(target)
        logger.info("Stored media %s (%d bytes)", path, len(upload.data))
        return ServiceResult(ok=True, op=op, data={"path": path, "size": len(upload.data)})

    def upload(self, upload: UploadedFile, origin: str) -> ServiceResult:
        """Media-endpoint upload: store, fire the hook, return the location."""
        op = "upload_media"
        stored = self.store(upload)
        if not stored.ok:
            return stored.as_op(op)

        warnings: list[str] = []
        path = stored.data["path"]
        self._notify("post_media_upload", warnings, path=path)
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": path, "location": f"{origin}{path}"},
            warnings=warnings,
        )
