"""ASGI adapter — Starlette in front of :class:`MicropubService`.

The adapter owns everything wire-specific: it awaits and decodes the body
into the tagged :data:`RequestBody` union, runs the synchronous service in
the threadpool, and copies the :class:`MicropubResponse` back out. Paths
other than the two Micropub endpoints are served from the built site.
"""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.responses import Response
from starlette.routing import Mount, Route
from starlette.staticfiles import StaticFiles

from micropress.domain.requests import (
    FormBody,
    JsonBody,
    MicropubRequest,
    MicropubResponse,
    MultipartBody,
    RequestBody,
    UploadedFile,
)
from micropress.infrastructure.site import Site
from micropress.services.micropub import MicropubService, error_response
from micropress.services.result import ServiceResult

if TYPE_CHECKING:
    from starlette.requests import Request

    from micropress.config.settings import MicropressSettings

log = structlog.get_logger("micropress.web")

FORM_TYPE = "application/x-www-form-urlencoded"
MULTIPART_TYPE = "multipart/form-data"
JSON_TYPE = "application/json"


class BodyDecodeError(ValueError):
    """The request declared JSON but the payload is not a JSON object."""


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";", 1)[0].strip().lower()


async def read_body(request: Request) -> RequestBody | None:
    """Decode the request body into its tagged variant.

    Returns None for bodiless requests and unsupported content types.

    Raises:
        BodyDecodeError: If a JSON body is not a JSON object.
    """
    media_type = _media_type(request)

    if media_type == JSON_TYPE:
        raw = await request.body()
        if not raw.strip():
            return JsonBody()
        try:
            data = json.loads(raw)
        except ValueError as exc:
            msg = f"Invalid JSON body: {exc}"
            raise BodyDecodeError(msg) from exc
        if not isinstance(data, dict):
            msg = "JSON body must be an object"
            raise BodyDecodeError(msg)
        return JsonBody(data=data)

    if media_type == FORM_TYPE:
        form = await request.form()
        return FormBody(fields=[(key, str(value)) for key, value in form.multi_items()])

    if media_type == MULTIPART_TYPE:
        form = await request.form()
        fields: list[tuple[str, str]] = []
        files: list[UploadedFile] = []
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                files.append(
                    UploadedFile(
                        field=key,
                        filename=value.filename or "",
                        content_type=value.content_type or "application/octet-stream",
                        data=await value.read(),
                    )
                )
            else:
                fields.append((key, value))
        await form.close()
        return MultipartBody(fields=fields, files=files)

    return None


def to_starlette(response: MicropubResponse) -> Response:
    return Response(
        content=response.body,
        status_code=response.status,
        headers=response.headers,
    )


def create_app(
    settings: MicropressSettings,
    *,
    site: Site | None = None,
    discover_plugins: bool = True,
) -> Starlette:
    """Build the ASGI application for *settings*.

    Pass *site* to reuse an already-configured :class:`Site` (tests attach
    their own plugin manager this way).
    """
    if site is None:
        site = Site(settings)
        site.init_plugins(discover=discover_plugins)
    service = MicropubService(site)

    async def micropub_endpoint(request: Request) -> Response:
        started = time.perf_counter()
        try:
            body = await read_body(request)
        except BodyDecodeError as exc:
            result = error_response(ServiceResult.failure("read_body", "INVALID_REQUEST", str(exc)))
        else:
            mp_request = MicropubRequest(
                method=request.method,
                url=str(request.url),
                headers={key.lower(): value for key, value in request.headers.items()},
                body=body,
            )
            result = await run_in_threadpool(service.handle, mp_request)

        log.info(
            "request.complete",
            method=request.method,
            path=request.url.path,
            status=result.status,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return to_starlette(result)

    micropub = settings.micropub
    routes: list[Route | Mount] = [
        Route(micropub.media_endpoint, micropub_endpoint, methods=["POST"]),
        Route(micropub.endpoint, micropub_endpoint, methods=["GET", "POST"]),
    ]
    if settings.server.static_dir:
        static_root = settings.site_root / settings.server.static_dir
        if static_root.is_dir():
            routes.append(Mount("/", app=StaticFiles(directory=static_root, html=True)))

    app = Starlette(routes=routes)
    app.state.site = site
    return app
