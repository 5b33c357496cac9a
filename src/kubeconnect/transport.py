"""Assemble the HTTP transport handed to resource operations."""

from __future__ import annotations

import ssl
from typing import Any

import httpx


def build_transport(
    ssl_context: ssl.SSLContext | None,
    auth: httpx.Auth | None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create the ``httpx.Client`` every resource operation sends requests through.

    Args:
        ssl_context: Custom TLS context, or None for the platform default.
        auth: Request authentication, or None.
        transport: Optional low-level transport, used by tests to avoid the network.

    Returns:
        A client that always follows redirects. It performs no retries.
    """
    kwargs: dict[str, Any] = {"auth": auth, "follow_redirects": True}
    if ssl_context is not None:
        kwargs["verify"] = ssl_context
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.Client(**kwargs)
