"""The cluster client: resolved configuration plus a ready-to-use transport."""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx
import structlog

from kubeconnect.auth import select_auth, select_scheme
from kubeconnect.config import ConfigBuilder, ResolvedConfig, missing_endpoint_message
from kubeconnect.errors import MissingEndpointError
from kubeconnect.sources import Filesystem, ProbeSources
from kubeconnect.tls import build_ssl_context
from kubeconnect.transport import build_transport
from kubeconnect.urls import ensure_absolute

log = structlog.get_logger()


class ClusterClient:
    """Owns the HTTP transport and the two base URLs resource operations need.

    Construction either completes or raises; a partially built client is never
    returned. Use as a context manager, or call ``close()`` when done.
    """

    def __init__(
        self,
        config: ResolvedConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        filesystem: Filesystem | None = None,
    ) -> None:
        if config is None:
            config = ConfigBuilder().build()
        if not config.master_url:
            raise MissingEndpointError(missing_endpoint_message())

        self._master_url = ensure_absolute(config.master_url, "master")
        self._extended_api_url = ensure_absolute(config.extended_api_url, "extended API")
        self._config = config

        ssl_context = build_ssl_context(config, filesystem=filesystem)
        self._http = build_transport(ssl_context, select_auth(config), transport=transport)
        self._closed = False

        log.info(
            "cluster_client_created",
            master_url=self._master_url,
            auth=select_scheme(config).value,
            tls="custom" if ssl_context is not None else "default",
            client_identity=config.has_client_identity,
        )

    @classmethod
    def from_master_url(cls, master_url: str, *, sources: ProbeSources | None = None) -> ClusterClient:
        """Resolve configuration as usual, then pin the master URL.

        Certificate files are read through ``sources.filesystem`` when sources are given.
        """
        config = ConfigBuilder(sources).master_url(master_url).build()
        return cls(config, filesystem=sources.filesystem if sources is not None else None)

    @property
    def config(self) -> ResolvedConfig:
        return self._config

    @property
    def master_url(self) -> str:
        return self._master_url

    @property
    def extended_api_url(self) -> str:
        return self._extended_api_url

    @property
    def http(self) -> httpx.Client:
        """The transport handle shared by resource operations."""
        return self._http

    @property
    def closed(self) -> bool:
        return self._closed

    def root_paths(self) -> Any:
        """Fetch the discovery document served at the primary API base URL."""
        response = self._http.get(self._master_url)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        """Release the transport and its connections. Safe to call more than once."""
        if self._closed:
            return
        self._http.close()
        self._closed = True
        log.debug("cluster_client_closed", master_url=self._master_url)

    def __enter__(self) -> ClusterClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
