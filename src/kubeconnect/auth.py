"""Pick the single request authentication scheme for a resolved configuration.

Client-certificate identity is not handled here; it is bound into the TLS
context.
"""

from __future__ import annotations

from collections.abc import Generator
from enum import Enum
from typing import TYPE_CHECKING

import httpx
import structlog

if TYPE_CHECKING:
    from kubeconnect.config import ResolvedConfig

log = structlog.get_logger()


class AuthScheme(str, Enum):
    BASIC = "basic"
    BEARER = "bearer"
    NONE = "none"


class BearerTokenAuth(httpx.Auth):
    """Set ``Authorization: Bearer <token>`` on every outgoing request."""

    def __init__(self, token: str) -> None:
        self._header_value = f"Bearer {token}"

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        # Assignment replaces any existing value, so the header appears once.
        request.headers["Authorization"] = self._header_value
        yield request


def select_scheme(config: ResolvedConfig) -> AuthScheme:
    """Return the scheme that applies: basic auth, then bearer token, then none."""
    if config.username is not None and config.password is not None:
        return AuthScheme.BASIC
    if config.oauth_token is not None:
        return AuthScheme.BEARER
    return AuthScheme.NONE


def select_auth(config: ResolvedConfig) -> httpx.Auth | None:
    """Build the httpx auth handler for ``config``.

    Basic auth is sent preemptively on the first request. When basic auth and a
    token are both configured, the token is ignored.
    """
    scheme = select_scheme(config)
    if scheme is AuthScheme.BASIC:
        if config.oauth_token is not None:
            log.debug("bearer_token_ignored", reason="basic auth takes precedence")
        return httpx.BasicAuth(config.username or "", config.password or "")
    if scheme is AuthScheme.BEARER:
        return BearerTokenAuth(config.oauth_token or "")
    return None
