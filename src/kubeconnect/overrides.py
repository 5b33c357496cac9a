"""Environment and property overrides applied on top of probe results.

Each override is looked up under its dotted property name first and then under
the derived environment variable (``kubernetes.master`` -> ``KUBERNETES_MASTER``).
A field is only replaced when its source is present.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from kubeconnect.sources import ProbeSources, property_to_env_var
from kubeconnect.utils import parse_bool, split_csv

MASTER_PROPERTY = "kubernetes.master"
API_VERSION_PROPERTY = "kubernetes.api.version"
OAPI_VERSION_PROPERTY = "kubernetes.oapi.version"

TLS_PROTOCOLS_PROPERTY = "kubernetes.tls.protocols"
TRUST_CERT_PROPERTY = "kubernetes.trust.certificates"
CA_CERTIFICATE_FILE_PROPERTY = "kubernetes.certs.ca.file"
CA_CERTIFICATE_DATA_PROPERTY = "kubernetes.certs.ca.data"
CLIENT_CERTIFICATE_FILE_PROPERTY = "kubernetes.certs.client.file"
CLIENT_CERTIFICATE_DATA_PROPERTY = "kubernetes.certs.client.data"
CLIENT_KEY_FILE_PROPERTY = "kubernetes.certs.client.key.file"
CLIENT_KEY_DATA_PROPERTY = "kubernetes.certs.client.key.data"
CLIENT_KEY_ALGO_PROPERTY = "kubernetes.certs.client.key.algo"
CLIENT_KEY_PASSPHRASE_PROPERTY = "kubernetes.certs.client.key.passphrase"

AUTH_BASIC_USERNAME_PROPERTY = "kubernetes.auth.basic.username"
AUTH_BASIC_PASSWORD_PROPERTY = "kubernetes.auth.basic.password"
OAUTH_TOKEN_PROPERTY = "kubernetes.auth.token"

# Probe switches, read before any probe runs.
TRY_KUBECONFIG_PROPERTY = "kubernetes.auth.tryKubeConfig"
TRY_SERVICE_ACCOUNT_PROPERTY = "kubernetes.auth.tryServiceAccount"


@dataclass(frozen=True)
class OverrideKey:
    """One overridable configuration field."""

    property_name: str
    field: str
    parse: Callable[[str], Any] = str

    @property
    def env_var(self) -> str:
        return property_to_env_var(self.property_name)


OVERRIDE_KEYS: tuple[OverrideKey, ...] = (
    OverrideKey(TRUST_CERT_PROPERTY, "trust_certs", parse_bool),
    OverrideKey(MASTER_PROPERTY, "master_url"),
    OverrideKey(API_VERSION_PROPERTY, "api_version"),
    OverrideKey(OAPI_VERSION_PROPERTY, "extended_api_version"),
    OverrideKey(CA_CERTIFICATE_FILE_PROPERTY, "ca_cert_file"),
    OverrideKey(CA_CERTIFICATE_DATA_PROPERTY, "ca_cert_data"),
    OverrideKey(CLIENT_CERTIFICATE_FILE_PROPERTY, "client_cert_file"),
    OverrideKey(CLIENT_CERTIFICATE_DATA_PROPERTY, "client_cert_data"),
    OverrideKey(CLIENT_KEY_FILE_PROPERTY, "client_key_file"),
    OverrideKey(CLIENT_KEY_DATA_PROPERTY, "client_key_data"),
    OverrideKey(CLIENT_KEY_ALGO_PROPERTY, "client_key_algo"),
    OverrideKey(CLIENT_KEY_PASSPHRASE_PROPERTY, "client_key_passphrase"),
    OverrideKey(OAUTH_TOKEN_PROPERTY, "oauth_token"),
    OverrideKey(AUTH_BASIC_USERNAME_PROPERTY, "username"),
    OverrideKey(AUTH_BASIC_PASSWORD_PROPERTY, "password"),
    OverrideKey(TLS_PROTOCOLS_PROPERTY, "enabled_protocols", split_csv),
)


def resolve_overrides(
    sources: ProbeSources,
    keys: tuple[OverrideKey, ...] = OVERRIDE_KEYS,
) -> dict[str, Any]:
    """Collect the override values that are actually present.

    Args:
        sources: Property mapping and environment to read from.
        keys: Override table; defaults to every documented key.

    Returns:
        A mapping of configuration field name to parsed value, containing only
        fields whose property or environment variable is set.
    """
    values: dict[str, Any] = {}
    for key in keys:
        raw = sources.lookup(key.property_name)
        if raw is None:
            continue
        values[key.field] = key.parse(raw)
    return values
