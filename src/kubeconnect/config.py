"""Resolved cluster configuration and the builder that layers its sources.

Precedence, lowest first: defaults, in-cluster service account, kubeconfig,
property/environment overrides, explicit builder calls.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, replace
from typing import Any

import structlog

from kubeconnect.certs import DEFAULT_KEY_ALGO, DEFAULT_KEY_PASSPHRASE
from kubeconnect.errors import MissingEndpointError
from kubeconnect.overrides import (
    MASTER_PROPERTY,
    TRY_KUBECONFIG_PROPERTY,
    TRY_SERVICE_ACCOUNT_PROPERTY,
    resolve_overrides,
)
from kubeconnect.probes import KubeconfigProbe, ServiceAccountProbe
from kubeconnect.sources import ProbeSources, property_to_env_var
from kubeconnect.urls import compose_urls

log = structlog.get_logger()

DEFAULT_MASTER_URL = "https://kubernetes.default.svc"
DEFAULT_API_VERSION = "v1"
DEFAULT_EXTENDED_API_VERSION = "v1"
DEFAULT_ENABLED_PROTOCOLS: tuple[str, ...] = ("TLSv1.2",)

_SECRET_FIELDS = ("password", "oauth_token", "client_key_passphrase", "client_key_data")
_INLINE_FIELDS = ("ca_cert_data", "client_cert_data")


@dataclass(frozen=True)
class ConfigDraft:
    """Working copy the builder updates; never shared between builders."""

    master_url: str | None = DEFAULT_MASTER_URL
    extended_api_url: str | None = None
    api_version: str = DEFAULT_API_VERSION
    extended_api_version: str = DEFAULT_EXTENDED_API_VERSION
    trust_certs: bool = False
    enabled_protocols: tuple[str, ...] = DEFAULT_ENABLED_PROTOCOLS
    ca_cert_file: str | None = None
    ca_cert_data: str | None = None
    client_cert_file: str | None = None
    client_cert_data: str | None = None
    client_key_file: str | None = None
    client_key_data: str | None = None
    client_key_algo: str = DEFAULT_KEY_ALGO
    client_key_passphrase: str = DEFAULT_KEY_PASSPHRASE
    username: str | None = None
    password: str | None = None
    oauth_token: str | None = None

    def update(self, **changes: Any) -> ConfigDraft:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)


@dataclass(frozen=True)
class ResolvedConfig:
    """Immutable snapshot of everything needed to reach and trust a cluster.

    ``master_url`` and ``extended_api_url`` are final, versioned base URLs that
    end in ``/``.
    """

    master_url: str
    extended_api_url: str
    api_version: str = DEFAULT_API_VERSION
    extended_api_version: str = DEFAULT_EXTENDED_API_VERSION
    trust_certs: bool = False
    enabled_protocols: tuple[str, ...] = DEFAULT_ENABLED_PROTOCOLS
    ca_cert_file: str | None = None
    ca_cert_data: str | None = None
    client_cert_file: str | None = None
    client_cert_data: str | None = None
    client_key_file: str | None = None
    client_key_data: str | None = None
    client_key_algo: str = DEFAULT_KEY_ALGO
    client_key_passphrase: str = DEFAULT_KEY_PASSPHRASE
    username: str | None = None
    password: str | None = None
    oauth_token: str | None = None

    @property
    def has_ca_material(self) -> bool:
        return bool(self.ca_cert_file or self.ca_cert_data)

    @property
    def has_client_identity(self) -> bool:
        """True only when both a client certificate and a client key are configured."""
        has_cert = bool(self.client_cert_file or self.client_cert_data)
        has_key = bool(self.client_key_file or self.client_key_data)
        return has_cert and has_key

    @property
    def has_basic_auth(self) -> bool:
        return self.username is not None and self.password is not None

    def redacted(self) -> dict[str, Any]:
        """Return the fields as a dict that is safe to print or log."""
        values = asdict(self)
        values["enabled_protocols"] = list(self.enabled_protocols)
        for name in _SECRET_FIELDS:
            if values[name] is not None:
                values[name] = "***"
        for name in _INLINE_FIELDS:
            if values[name] is not None:
                values[name] = "<inline>"
        return values


def missing_endpoint_message() -> str:
    return (
        "Unknown Kubernetes master URL - please set with the builder, or set with either "
        f'property "{MASTER_PROPERTY}" or environment variable "{property_to_env_var(MASTER_PROPERTY)}"'
    )


class ConfigBuilder:
    """Layer the configuration sources and freeze the result.

    Construction runs the probes and applies overrides; the chaining methods
    then set explicit values, which always win. ``build()`` composes the base
    URLs and returns a ``ResolvedConfig``.

    Example:
        >>> config = ConfigBuilder().master_url("https://10.0.0.1:6443").token("abc").build()
        >>> config.master_url
        'https://10.0.0.1:6443/api/v1/'
    """

    def __init__(self, sources: ProbeSources | None = None) -> None:
        self._sources = sources if sources is not None else ProbeSources.from_process()
        draft = ConfigDraft()
        if self._sources.lookup_bool(TRY_SERVICE_ACCOUNT_PROPERTY, True):
            draft = draft.update(**ServiceAccountProbe(self._sources).probe())
        if self._sources.lookup_bool(TRY_KUBECONFIG_PROPERTY, True):
            draft = draft.update(**KubeconfigProbe(self._sources).probe())
        self._draft = draft.update(**resolve_overrides(self._sources))

    @property
    def draft(self) -> ConfigDraft:
        """The current pre-finalization values."""
        return self._draft

    @property
    def sources(self) -> ProbeSources:
        return self._sources

    def _set(self, **changes: Any) -> ConfigBuilder:
        self._draft = self._draft.update(**changes)
        return self

    def master_url(self, master_url: str) -> ConfigBuilder:
        return self._set(master_url=master_url)

    def extended_api_url(self, extended_api_url: str) -> ConfigBuilder:
        return self._set(extended_api_url=extended_api_url)

    def api_version(self, api_version: str) -> ConfigBuilder:
        return self._set(api_version=api_version)

    def extended_api_version(self, extended_api_version: str) -> ConfigBuilder:
        return self._set(extended_api_version=extended_api_version)

    def trust_certs(self, trust_certs: bool) -> ConfigBuilder:
        return self._set(trust_certs=trust_certs)

    def enabled_protocols(self, protocols: Iterable[str]) -> ConfigBuilder:
        return self._set(enabled_protocols=tuple(protocols))

    def ca_cert_file(self, ca_cert_file: str) -> ConfigBuilder:
        return self._set(ca_cert_file=ca_cert_file)

    def ca_cert_data(self, ca_cert_data: str) -> ConfigBuilder:
        return self._set(ca_cert_data=ca_cert_data)

    def client_cert_file(self, client_cert_file: str) -> ConfigBuilder:
        return self._set(client_cert_file=client_cert_file)

    def client_cert_data(self, client_cert_data: str) -> ConfigBuilder:
        return self._set(client_cert_data=client_cert_data)

    def client_key_file(self, client_key_file: str) -> ConfigBuilder:
        return self._set(client_key_file=client_key_file)

    def client_key_data(self, client_key_data: str) -> ConfigBuilder:
        return self._set(client_key_data=client_key_data)

    def client_key_algo(self, client_key_algo: str) -> ConfigBuilder:
        return self._set(client_key_algo=client_key_algo)

    def client_key_passphrase(self, client_key_passphrase: str) -> ConfigBuilder:
        return self._set(client_key_passphrase=client_key_passphrase)

    def basic_auth(self, username: str, password: str) -> ConfigBuilder:
        return self._set(username=username, password=password)

    def token(self, token: str) -> ConfigBuilder:
        return self._set(oauth_token=token)

    def build(self) -> ResolvedConfig:
        """Compose the base URLs and freeze the draft.

        Raises:
            MissingEndpointError: If no master URL was resolved from any source.
            InvalidEndpointError: If a composed URL is not a valid absolute URL.
        """
        draft = self._draft
        if not draft.master_url:
            raise MissingEndpointError(missing_endpoint_message())

        urls = compose_urls(
            draft.master_url,
            draft.extended_api_url,
            draft.api_version,
            draft.extended_api_version,
        )
        values = asdict(draft)
        values.update(master_url=urls.master_url, extended_api_url=urls.extended_api_url)
        return ResolvedConfig(**values)
