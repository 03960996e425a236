"""Tests for MicropubService request routing and error mapping."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from micropress.config.models import SiteConfig
from micropress.config.settings import MicropressSettings
from micropress.domain.frontmatter import decode
from micropress.domain.requests import (
    FormBody,
    JsonBody,
    MicropubRequest,
    MicropubResponse,
    MultipartBody,
    UploadedFile,
)
from micropress.infrastructure.site import Site
from micropress.services.micropub import MicropubService, error_response
from micropress.services.result import ServiceResult
from tests.conftest import FIXED_NOW, ORIGIN, write_post

ENDPOINT = f"{ORIGIN}/micropub"
MEDIA_ENDPOINT = f"{ORIGIN}/micropub/upload-media"
AUTH = {"authorization": "Bearer token"}
POST_ID = "2022-04-08-2aa6f7"


def _send(
    site: Site,
    method: str = "POST",
    url: str = ENDPOINT,
    body=None,
    headers: dict[str, str] | None = None,
) -> MicropubResponse:
    request = MicropubRequest(
        method=method,
        url=url,
        headers=AUTH if headers is None else headers,
        body=body,
    )
    return MicropubService(site).handle(request, now=FIXED_NOW)


def _json(response: MicropubResponse) -> dict:
    assert response.body is not None
    return json.loads(response.body)


class TestAuth:
    def test_missing_token(self, site: Site) -> None:
        response = _send(site, body=FormBody(fields=[("content", "x")]), headers={})
        assert response.status == 401
        assert _json(response)["error"] == "unauthorized"

    def test_token_in_both_places(self, site: Site, site_root: Path) -> None:
        body = FormBody(fields=[("access_token", "token"), ("content", "x")])
        response = _send(site, body=body)
        assert response.status == 400
        assert _json(response)["error"] == "invalid_request"
        assert not (site_root / "h-entry").exists()

    def test_checked_before_query(self, site: Site) -> None:
        response = _send(site, "GET", f"{ENDPOINT}?q=config", headers={})
        assert response.status == 401


class TestQuery:
    def test_config(self, site: Site) -> None:
        response = _send(site, "GET", f"{ENDPOINT}?q=config")
        assert response.status == 200
        assert response.headers["Content-Type"] == "application/json"
        assert _json(response) == {"media-endpoint": MEDIA_ENDPOINT, "syndicate-to": []}

    def test_syndicate_to(self, site: Site) -> None:
        response = _send(site, "GET", f"{ENDPOINT}?q=syndicate-to")
        assert _json(response) == {"syndicate-to": []}

    def test_unknown_query(self, site: Site) -> None:
        response = _send(site, "GET", f"{ENDPOINT}?q=nonsense")
        assert response.status == 404
        assert _json(response)["error"] == "not_found"

    def test_source(self, site: Site, site_root: Path) -> None:
        write_post(site_root, f"h-entry/{POST_ID}.md", {"h": ["entry"]}, body="Body")
        url = f"{ENDPOINT}?q=source&url={ORIGIN}/h-entry/{POST_ID}"
        assert _json(_send(site, "GET", url))["properties"]["content"] == ["Body"]


class TestCreate:
    def test_form(self, site: Site, site_root: Path) -> None:
        body = FormBody(
            fields=[
                ("h", "entry"),
                ("content", "hello world"),
                ("category[]", "foo"),
                ("category[]", "bar"),
            ]
        )
        response = _send(site, body=body)
        assert response.status == 201
        assert response.headers["Location"] == f"{ORIGIN}/h-entry/{POST_ID}"
        assert response.body is None
        stored = decode((site_root / "h-entry" / f"{POST_ID}.md").read_text())
        assert stored["category"] == ["foo", "bar"]

    def test_json(self, site: Site, site_root: Path) -> None:
        body = JsonBody(
            data={"type": ["h-entry"], "properties": {"content": ["hello world"], "name": ["T"]}}
        )
        response = _send(site, body=body)
        assert response.status == 201
        assert decode((site_root / "h-entry" / f"{POST_ID}.md").read_text())["name"] == ["T"]

    def test_json_invalid_type(self, site: Site) -> None:
        response = _send(site, body=JsonBody(data={"type": ["entry"], "properties": {}}))
        assert response.status == 400

    def test_unsafe_property_name_writes_nothing(self, site: Site, site_root: Path) -> None:
        body = FormBody(fields=[("h", "entry"), ("content", "hi"), ("tag\nx", "v")])
        response = _send(site, body=body)
        assert response.status == 400
        assert _json(response)["error"] == "invalid_request"
        assert not (site_root / "h-entry").exists()

    def test_unknown_action_creates(self, site: Site) -> None:
        body = FormBody(fields=[("action", "update"), ("content", "hello world")])
        assert _send(site, body=body).status == 201

    def test_multipart_with_photo(self, site: Site, site_root: Path) -> None:
        body = MultipartBody(
            fields=[("content", "hello world")],
            files=[UploadedFile("photo", "a.png", "image/png", b"png")],
        )
        assert _send(site, body=body).status == 201
        assert (site_root / "img" / f"{POST_ID}-1-a.png").read_bytes() == b"png"

    def test_configured_origin(self, settings: MicropressSettings) -> None:
        configured = settings.model_copy(
            update={"site": SiteConfig(origin="https://blog.example/")}
        )
        response = _send(Site(configured), body=FormBody(fields=[("content", "hello world")]))
        assert response.headers["Location"] == f"https://blog.example/h-entry/{POST_ID}"


class TestDraft:
    @pytest.fixture
    def post(self, site_root: Path) -> Path:
        return write_post(site_root, f"h-entry/{POST_ID}.md", {"h": ["entry"]})

    def test_delete(self, site: Site, post: Path) -> None:
        body = FormBody(fields=[("action", "delete"), ("url", f"{ORIGIN}/h-entry/{POST_ID}")])
        response = _send(site, body=body)
        assert response.status == 204
        assert decode(post.read_text())["draft"] is True

    def test_undelete_json(self, site: Site, post: Path) -> None:
        body = JsonBody(data={"action": "undelete", "url": f"{ORIGIN}/h-entry/{POST_ID}"})
        assert _send(site, body=body).status == 204
        assert decode(post.read_text())["draft"] is False

    def test_missing_url(self, site: Site) -> None:
        response = _send(site, body=FormBody(fields=[("action", "delete")]))
        assert response.status == 400
        assert _json(response)["error_description"] == "No URL entry"

    def test_missing_post(self, site: Site) -> None:
        body = FormBody(fields=[("action", "delete"), ("url", f"{ORIGIN}/h-entry/nope")])
        assert _send(site, body=body).status == 404

    def test_malformed_post(self, site: Site, site_root: Path) -> None:
        (site_root / "h-entry").mkdir()
        (site_root / "h-entry" / "bad.md").write_text("no block")
        body = FormBody(fields=[("action", "delete"), ("url", f"{ORIGIN}/h-entry/bad")])
        assert _send(site, body=body).status == 500


class TestMedia:
    def test_upload(self, site: Site, site_root: Path) -> None:
        body = MultipartBody(files=[UploadedFile("file", "cat.jpg", "image/jpeg", b"jpg")])
        response = _send(site, url=MEDIA_ENDPOINT, body=body)
        assert response.status == 201
        assert response.headers["Location"] == f"{ORIGIN}/img/cat.jpg"
        assert (site_root / "img" / "cat.jpg").read_bytes() == b"jpg"

    def test_missing_file_part(self, site: Site) -> None:
        body = MultipartBody(files=[UploadedFile("photo", "cat.jpg", "image/jpeg", b"jpg")])
        assert _send(site, url=MEDIA_ENDPOINT, body=body).status == 400

    def test_requires_token(self, site: Site) -> None:
        body = MultipartBody(files=[UploadedFile("file", "cat.jpg", "image/jpeg", b"jpg")])
        assert _send(site, url=MEDIA_ENDPOINT, body=body, headers={}).status == 401


class TestFallbacks:
    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH"])
    def test_other_requests_accepted(self, site: Site, method: str) -> None:
        response = _send(site, method)
        assert response.status == 202
        assert response.headers == {"Location": "/"}
        assert response.body is None

    def test_unexpected_exception_is_bare_500(self, site: Site) -> None:
        with patch(
            "micropress.services.micropub.PostService.publish",
            side_effect=RuntimeError("disk on fire"),
        ):
            response = _send(site, body=FormBody(fields=[("content", "x")]))
        assert response.status == 500
        assert response.body is None


class TestErrorResponse:
    def test_unknown_code_is_bare_500(self) -> None:
        response = error_response(ServiceResult.failure("op", "SOMETHING_ELSE", "?"))
        assert response.status == 500
        assert response.body is None

    def test_io_error_body(self) -> None:
        response = error_response(ServiceResult.failure("op", "IO_ERROR", "disk full"))
        assert response.status == 500
        assert _json(response) == {"error": "server_error", "error_description": "disk full"}
