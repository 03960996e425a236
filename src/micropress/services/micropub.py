"""MicropubService — orchestrates one Micropub request end to end.

Pipeline: EXTRACT TOKEN → ROUTE → (QUERY | MEDIA | CLASSIFY → NORMALIZE → PERSIST) → RESPOND

Every stage returns a :class:`ServiceResult`; only :meth:`MicropubService.handle`
turns results into HTTP status codes. Anything raised past the stages is an
unrecognized failure and becomes a bare 500.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlsplit

from micropress.domain.actions import classify
from micropress.domain.errors import MicropubError
from micropress.domain.normalize import get_field, normalize
from micropress.domain.requests import Action, MicropubRequest, MicropubResponse, MultipartBody
from micropress.services._helpers import origin_of
from micropress.services.auth import extract_access_token
from micropress.services.base import BaseService
from micropress.services.media import MediaService
from micropress.services.posts import PostService
from micropress.services.query import QueryService
from micropress.services.result import ServiceResult

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)

# ServiceError.code -> HTTP status
STATUS_BY_CODE: dict[str, int] = {
    "UNAUTHORIZED": 401,
    "TOKEN_CONFLICT": 400,
    "INVALID_REQUEST": 400,
    "NOT_FOUND": 404,
    "MALFORMED_DOCUMENT": 500,
    "IO_ERROR": 500,
}

# ServiceError.code -> Micropub ``error`` value
_ERROR_NAMES: dict[str, str] = {
    "UNAUTHORIZED": "unauthorized",
    "TOKEN_CONFLICT": "invalid_request",
    "INVALID_REQUEST": "invalid_request",
    "NOT_FOUND": "not_found",
}

MEDIA_FIELD = "file"


def json_response(payload: dict[str, Any], status: int = 200) -> MicropubResponse:
    return MicropubResponse(
        status=status,
        headers={"Content-Type": "application/json"},
        body=json.dumps(payload).encode("utf-8"),
    )


def error_response(result: ServiceResult) -> MicropubResponse:
    """Map a failed result to its status and a Micropub error body."""
    code = result.code or ""
    status = STATUS_BY_CODE.get(code)
    if status is None:
        return MicropubResponse(status=500)
    payload = {
        "error": _ERROR_NAMES.get(code, "server_error"),
        "error_description": result.error.message if result.error else "",
    }
    return json_response(payload, status)


class MicropubService(BaseService):
    """Handles requests to the Micropub and media endpoints."""

    def handle(self, request: MicropubRequest, *, now: datetime | None = None) -> MicropubResponse:
        """Process *request* to completion and return the response."""
        try:
            return self._handle(request, now)
        except Exception:
            logger.exception("Unhandled error for %s %s", request.method, urlsplit(request.url).path)
            return MicropubResponse(status=500)

    # ------------------------------------------------------------------
    # Routing
    # ------------------------------------------------------------------

    def _handle(self, request: MicropubRequest, now: datetime | None) -> MicropubResponse:
        token = extract_access_token(request)
        if not token.ok:
            logger.info("Rejected request: %s", token.code)
            return error_response(token)

        parts = urlsplit(request.url)
        params = parse_qsl(parts.query, keep_blank_values=True)
        origin = self._origin(request.url)
        method = request.method.upper()

        if method == "GET":
            q = next((value for key, value in params if key == "q"), None)
            if q is not None:
                return self._respond(QueryService(self._site).query(q, params, origin))

        if method == "POST":
            media_path = self._site.settings.micropub.media_endpoint.rstrip("/")
            if parts.path.rstrip("/") == media_path:
                return self._media(request, origin)

            action = classify(request.body)
            if action is Action.CREATE:
                return self._create(request, origin, now)
            return self._set_draft(request, action)

        return MicropubResponse(status=202, headers={"Location": "/"})

    def _origin(self, url: str) -> str:
        configured = self._site.settings.site.origin
        return (configured or origin_of(url)).rstrip("/")

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def _create(
        self,
        request: MicropubRequest,
        origin: str,
        now: datetime | None,
    ) -> MicropubResponse:
        try:
            normalized = normalize(request.body)
        except MicropubError as exc:
            return error_response(ServiceResult.from_exception("normalize", exc))

        result = PostService(self._site).publish(normalized, origin, now=now)
        if not result.ok:
            return error_response(result)
        return MicropubResponse(status=201, headers={"Location": result.data["location"]})

    def _set_draft(self, request: MicropubRequest, action: Action) -> MicropubResponse:
        url = get_field(request.body, "url")
        if not url:
            return error_response(
                ServiceResult.failure(f"{action}_post", "INVALID_REQUEST", "No URL entry")
            )
        result = PostService(self._site).set_draft(url, draft=action is Action.DELETE)
        if not result.ok:
            return error_response(result)
        return MicropubResponse(status=204)

    def _media(self, request: MicropubRequest, origin: str) -> MicropubResponse:
        body = request.body
        upload = None
        if isinstance(body, MultipartBody):
            upload = next((f for f in body.files if f.field == MEDIA_FIELD), None)
        if upload is None:
            return error_response(
                ServiceResult.failure("upload_media", "INVALID_REQUEST", "No file part")
            )
        result = MediaService(self._site).upload(upload, origin)
        if not result.ok:
            return error_response(result)
        return MicropubResponse(status=201, headers={"Location": result.data["location"]})

    @staticmethod
    def _respond(result: ServiceResult) -> MicropubResponse:
        if not result.ok:
            return error_response(result)
        return json_response(result.data)
