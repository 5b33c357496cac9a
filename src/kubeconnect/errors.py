"""Error hierarchy for configuration resolution and transport construction."""

from __future__ import annotations


class KubeConnectError(Exception):
    """Base class for every error raised by kubeconnect."""


class MissingEndpointError(KubeConnectError):
    """No master URL was resolved from any source."""


class CredentialMaterialError(KubeConnectError):
    """Certificate or key material was supplied but is unreadable or malformed."""


class TLSBootstrapError(KubeConnectError):
    """The TLS context could not be initialised from the resolved material."""


class InvalidEndpointError(KubeConnectError):
    """A composed base URL is not a valid absolute URL."""


class CredentialFileParseError(KubeConnectError):
    """The local kubeconfig file exists but cannot be parsed.

    Absorbed by the kubeconfig probe; never escapes client construction.
    """


class ProbeIOError(KubeConnectError):
    """Reading an in-cluster service account file failed.

    Absorbed by the service account probe; never escapes client construction.
    """
