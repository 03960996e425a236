"""PostService — create posts and flip their draft flag.

Create pipeline: FINALIZE → DEDUPE ID → UPLOAD PHOTOS → RENDER → PERSIST → EVENT → RESPOND

Posts live at ``{site_root}/{type}/{postId}.md``. Delete and undelete are
soft: they rewrite the ``draft`` line and leave the body untouched.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Any

from micropress.domain.content import body_from_rest, render_post
from micropress.domain.errors import MalformedDocumentError, MicropubError
from micropress.domain.frontmatter import encode, split_document
from micropress.domain.ids import validate_post_id
from micropress.domain.normalize import finalize
from micropress.domain.requests import CreateRequest, NormalizedCreate, PropertyMap
from micropress.services._helpers import utc_now
from micropress.services.base import BaseService
from micropress.services.media import MediaService
from micropress.services.result import ServiceResult

logger = logging.getLogger(__name__)

TYPE_PATTERN = re.compile(r"^h-[a-z0-9][a-z0-9-]*$")

# Attempts at a fresh post id when the derived one is already on disk.
MAX_ID_ATTEMPTS = 5


def _first(properties: PropertyMap, key: str) -> Any:
    value = properties.get(key)
    if isinstance(value, list) and value:
        return value[0]
    return None


class PostService(BaseService):
    """Reads and writes post documents below the site root."""

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def publish(
        self,
        normalized: NormalizedCreate,
        origin: str,
        *,
        now: datetime | None = None,
    ) -> ServiceResult:
        """Finalize a normalized request, upload its photos, and create the post."""
        op = "publish_post"
        now = now or utc_now()
        warnings = list(normalized.warnings)

        request = finalize(normalized.request, now)
        for _attempt in range(1, MAX_ID_ATTEMPTS):
            if not self._exists(request):
                break
            taken = _first(request.properties, "postId")
            logger.warning("Post id %s already taken; re-deriving", taken)
            now += timedelta(milliseconds=1)
            request = finalize(normalized.request, now)
        else:
            if self._exists(request):
                return ServiceResult.failure(
                    op,
                    "IO_ERROR",
                    "Could not derive an unused post id",
                    post_id=_first(request.properties, "postId"),
                )

        if normalized.uploads:
            uploaded = self._upload_photos(request, normalized)
            if not uploaded.ok:
                return uploaded.as_op(op)
            request = uploaded.data["request"]

        result = self.create(request, origin)
        return result.as_op(op, warnings=warnings)

    def create(self, request: CreateRequest, origin: str) -> ServiceResult:
        """Write a finalized *request* to ``{type}/{postId}.md``.

        Returns ``data={"location", "path", "post_id", "type"}``.
        """
        op = "create_post"
        post_id = _first(request.properties, "postId")
        if not isinstance(post_id, str) or not validate_post_id(post_id):
            return ServiceResult.failure(op, "INVALID_REQUEST", f"Invalid postId: {post_id!r}")
        if not TYPE_PATTERN.match(request.type):
            return ServiceResult.failure(op, "INVALID_REQUEST", f"Invalid type: {request.type!r}")

        files = self._site.files
        try:
            path = files.post_path(request.type, post_id)
        except ValueError as exc:
            return ServiceResult.failure(op, "INVALID_REQUEST", str(exc))

        try:
            files.write_text(path, render_post(request.properties))
        except OSError as exc:
            logger.error("Failed to write post %s: %s", path, exc)
            return ServiceResult.failure(op, "IO_ERROR", f"Could not write post {post_id}")

        location = f"{origin}/{request.type}/{post_id}"
        logger.info("Created post %s", location)

        warnings: list[str] = []
        self._notify(
            "post_create",
            warnings,
            post_type=request.type,
            post_id=post_id,
            path=str(path),
            location=location,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "location": location,
                "path": str(path),
                "post_id": post_id,
                "type": request.type,
            },
            warnings=warnings,
        )

    def _exists(self, request: CreateRequest) -> bool:
        post_id = _first(request.properties, "postId")
        if not isinstance(post_id, str) or not TYPE_PATTERN.match(request.type):
            return False
        try:
            return self._site.files.post_path(request.type, post_id).exists()
        except ValueError:
            return False

    def _upload_photos(self, request: CreateRequest, normalized: NormalizedCreate) -> ServiceResult:
        """Store pending photo files as ``{postId}-{n}-{name}`` and list them on ``photo``."""
        op = "upload_photos"
        post_id = _first(request.properties, "postId")
        media = MediaService(self._site)

        existing = request.properties.get("photo")
        photos: list[Any] = list(existing) if isinstance(existing, list) else []
        for index, upload in enumerate(normalized.uploads, start=1):
            stored = media.store(upload, prefix=f"{post_id}-{index}")
            if not stored.ok:
                return stored.as_op(op)
            photos.append(stored.data["path"])

        properties = {**request.properties, "photo": photos}
        return ServiceResult(
            ok=True,
            op=op,
            data={"request": request.model_copy(update={"properties": properties})},
        )

    # ------------------------------------------------------------------
    # Delete / undelete
    # ------------------------------------------------------------------

    def set_draft(self, url: str, draft: bool) -> ServiceResult:
        """Set ``draft`` on the post at *url*, preserving its body exactly."""
        op = "delete_post" if draft else "undelete_post"
        files = self._site.files
        try:
            path = files.url_to_path(url)
        except ValueError as exc:
            return ServiceResult.failure(op, "INVALID_REQUEST", str(exc), url=url)

        try:
            text = files.read_text(path)
        except FileNotFoundError:
            return ServiceResult.failure(op, "NOT_FOUND", f"No post at {url}", url=url)
        except UnicodeDecodeError:
            return ServiceResult.failure(
                op, "MALFORMED_DOCUMENT", f"Post at {url} is not UTF-8", url=url
            )
        except OSError as exc:
            logger.error("Failed to read post %s: %s", path, exc)
            return ServiceResult.failure(op, "IO_ERROR", f"Could not read post at {url}")

        try:
            properties, rest = split_document(text)
        except MalformedDocumentError as exc:
            return ServiceResult.failure(op, exc.code, str(exc), url=url)

        properties["draft"] = draft
        try:
            files.write_text(path, encode(properties) + rest)
        except OSError as exc:
            logger.error("Failed to rewrite post %s: %s", path, exc)
            return ServiceResult.failure(op, "IO_ERROR", f"Could not write post at {url}")

        logger.info("Set draft=%s on %s", draft, url)
        warnings: list[str] = []
        self._notify("post_draft_change", warnings, path=str(path), draft=draft)
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": str(path), "draft": draft},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Source query
    # ------------------------------------------------------------------

    def source(self, url: str, properties: list[str] | None = None) -> ServiceResult:
        """Load the post at *url* in Micropub JSON form.

        The stored body is returned as ``content``. With *properties*, only
        those keys are returned and ``type`` is omitted.
        """
        op = "source_post"
        files = self._site.files
        try:
            path = files.url_to_path(url)
            text = files.read_text(path)
            stored, rest = split_document(text)
        except FileNotFoundError:
            return ServiceResult.failure(op, "NOT_FOUND", f"No post at {url}", url=url)
        except UnicodeDecodeError:
            return ServiceResult.failure(
                op, "MALFORMED_DOCUMENT", f"Post at {url} is not UTF-8", url=url
            )
        except MicropubError as exc:
            return ServiceResult.failure(op, exc.code, str(exc), url=url)
        except ValueError as exc:
            return ServiceResult.failure(op, "INVALID_REQUEST", str(exc), url=url)
        except OSError as exc:
            logger.error("Failed to read post for %s: %s", url, exc)
            return ServiceResult.failure(op, "IO_ERROR", f"Could not read post at {url}")

        props: dict[str, Any] = {
            key: ([value] if isinstance(value, bool) else value) for key, value in stored.items()
        }
        props["content"] = [body_from_rest(rest)]

        if properties:
            selected = {key: props[key] for key in properties if key in props}
            return ServiceResult(ok=True, op=op, data={"properties": selected})

        kind = _first(stored, "h") or path.parent.name.removeprefix("h-")
        return ServiceResult(
            ok=True,
            op=op,
            data={"type": [f"h-{kind}"], "properties": props},
        )
