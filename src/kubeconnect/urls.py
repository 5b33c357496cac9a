"""Compose the primary and extended API base URLs."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from kubeconnect.errors import InvalidEndpointError

API_PREFIX = "api/"
EXTENDED_API_PREFIX = "oapi/"

_ALLOWED_SCHEMES = {"http", "https"}


@dataclass(frozen=True)
class ComposedUrls:
    master_url: str
    extended_api_url: str


def ensure_trailing_slash(url: str) -> str:
    """Return ``url`` ending in exactly one ``/``."""
    return url.rstrip("/") + "/"


def ensure_absolute(url: str, label: str = "endpoint") -> str:
    """Check that ``url`` is an absolute http(s) URL with a host.

    Raises:
        InvalidEndpointError: If the URL cannot be parsed or is not absolute.
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        msg = f"Invalid {label} URL {url!r}: {exc}"
        raise InvalidEndpointError(msg) from exc

    if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.host:
        msg = f"Invalid {label} URL {url!r}: must be an absolute http(s) URL."
        raise InvalidEndpointError(msg)
    return url


def compose_urls(
    master_url: str,
    extended_api_url: str | None,
    api_version: str,
    extended_api_version: str,
) -> ComposedUrls:
    """Derive both versioned base URLs from the master URL.

    ``https://x`` with version ``v1`` yields ``https://x/api/v1/`` and, when no
    extended API URL is given, ``https://x/oapi/v1/``.

    Raises:
        InvalidEndpointError: If either resulting URL is not a valid absolute URL.
    """
    base = ensure_trailing_slash(master_url)
    if extended_api_url is None:
        extended_api_url = f"{base}{EXTENDED_API_PREFIX}{extended_api_version}/"
    else:
        extended_api_url = ensure_trailing_slash(extended_api_url)
    composed = ComposedUrls(
        master_url=f"{base}{API_PREFIX}{api_version}/",
        extended_api_url=extended_api_url,
    )
    ensure_absolute(composed.master_url, "master")
    ensure_absolute(composed.extended_api_url, "extended API")
    return composed
