"""Resolve cluster credentials and build a secure transport for the Kubernetes API."""

from kubeconnect.auth import AuthScheme, BearerTokenAuth, select_auth, select_scheme
from kubeconnect.client import ClusterClient
from kubeconnect.config import ConfigBuilder, ConfigDraft, ResolvedConfig
from kubeconnect.errors import (
    CredentialFileParseError,
    CredentialMaterialError,
    InvalidEndpointError,
    KubeConnectError,
    MissingEndpointError,
    ProbeIOError,
    TLSBootstrapError,
)
from kubeconnect.sources import LocalFilesystem, ProbeSources

__all__ = [
    "AuthScheme",
    "BearerTokenAuth",
    "ClusterClient",
    "ConfigBuilder",
    "ConfigDraft",
    "CredentialFileParseError",
    "CredentialMaterialError",
    "InvalidEndpointError",
    "KubeConnectError",
    "LocalFilesystem",
    "MissingEndpointError",
    "ProbeIOError",
    "ProbeSources",
    "ResolvedConfig",
    "TLSBootstrapError",
    "select_auth",
    "select_scheme",
]
