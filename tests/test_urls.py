"""Tests for urls.py: base URL composition."""

from __future__ import annotations

import pytest

from kubeconnect.errors import InvalidEndpointError
from kubeconnect.urls import compose_urls, ensure_absolute, ensure_trailing_slash


class TestEnsureTrailingSlash:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://x", "https://x/"),
            ("https://x/", "https://x/"),
            ("https://x//", "https://x/"),
            ("https://x/prefix", "https://x/prefix/"),
        ],
    )
    def test_exactly_one_slash(self, url: str, expected: str) -> None:
        assert ensure_trailing_slash(url) == expected


class TestComposeUrls:
    def test_defaults(self) -> None:
        urls = compose_urls("https://x", None, "v1", "v1")
        assert urls.master_url == "https://x/api/v1/"
        assert urls.extended_api_url == "https://x/oapi/v1/"

    def test_trailing_slash_on_master(self) -> None:
        urls = compose_urls("https://x:6443/", None, "v1", "v1")
        assert urls.master_url == "https://x:6443/api/v1/"
        assert urls.extended_api_url == "https://x:6443/oapi/v1/"

    def test_versions(self) -> None:
        urls = compose_urls("https://x", None, "v2", "v3")
        assert urls.master_url == "https://x/api/v2/"
        assert urls.extended_api_url == "https://x/oapi/v3/"

    def test_explicit_extended_url_is_kept(self) -> None:
        urls = compose_urls("https://x", "https://openshift.example.com/oapi/v1/", "v1", "v1")
        assert urls.master_url == "https://x/api/v1/"
        assert urls.extended_api_url == "https://openshift.example.com/oapi/v1/"

    @pytest.mark.parametrize("extended", ["https://ext.example.com/oapi/v1", "https://ext.example.com/oapi/v1//"])
    def test_explicit_extended_url_gets_one_trailing_slash(self, extended: str) -> None:
        urls = compose_urls("https://x", extended, "v1", "v1")
        assert urls.extended_api_url == "https://ext.example.com/oapi/v1/"

    def test_path_prefix_preserved(self) -> None:
        urls = compose_urls("https://proxy.example.com/k8s", None, "v1", "v1")
        assert urls.master_url == "https://proxy.example.com/k8s/api/v1/"

    @pytest.mark.parametrize("master", ["not a url", "cluster.local", "ftp://x", "https://"])
    def test_invalid_master(self, master: str) -> None:
        with pytest.raises(InvalidEndpointError, match="Invalid master URL"):
            compose_urls(master, None, "v1", "v1")

    def test_invalid_extended_url(self) -> None:
        with pytest.raises(InvalidEndpointError, match="Invalid extended API URL"):
            compose_urls("https://x", "oapi/v1/", "v1", "v1")


class TestEnsureAbsolute:
    def test_returns_url_unchanged(self) -> None:
        assert ensure_absolute("http://127.0.0.1:8080/api/v1/") == "http://127.0.0.1:8080/api/v1/"

    def test_label_in_message(self) -> None:
        with pytest.raises(InvalidEndpointError, match="Invalid proxy URL"):
            ensure_absolute("relative/path", "proxy")
