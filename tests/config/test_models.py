"""Tests for config section validation."""

import pytest
from pydantic import ValidationError

from micropress.config.models import MediaConfig, MicropubConfig, ServerConfig, SiteConfig


class TestSiteConfig:
    def test_origin_must_be_http(self) -> None:
        with pytest.raises(ValidationError):
            SiteConfig(origin="example.com")

    def test_origin_accepted(self) -> None:
        assert SiteConfig(origin="https://example.com").origin == "https://example.com"


class TestMicropubConfig:
    def test_paths_must_be_rooted(self) -> None:
        with pytest.raises(ValidationError):
            MicropubConfig(endpoint="micropub")

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MicropubConfig(endpoint="/m", token_endpoint="/token")


class TestMediaConfig:
    @pytest.mark.parametrize("directory", ["/var/www/img", "../img", ""])
    def test_directory_must_stay_in_site(self, directory: str) -> None:
        with pytest.raises(ValidationError):
            MediaConfig(directory=directory)

    def test_nested_directory(self) -> None:
        assert MediaConfig(directory="static/img").directory == "static/img"


class TestServerConfig:
    def test_port_range(self) -> None:
        with pytest.raises(ValidationError):
            ServerConfig(port=0)
