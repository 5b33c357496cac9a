"""Local kubeconfig probe."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from kubeconnect.errors import CredentialFileParseError
from kubeconnect.models import AuthInfo, Cluster, KubeConfig
from kubeconnect.sources import ProbeSources

log = structlog.get_logger()

KUBECONFIG_PROPERTY = "kubeconfig"
DEFAULT_KUBECONFIG_PATH = Path(".kube") / "config"


def parse_kubeconfig(text: str, source: str = "<string>") -> KubeConfig:
    """Parse kubeconfig YAML into a ``KubeConfig``.

    Args:
        text: Raw YAML content.
        source: Where the content came from, used in error messages.

    Raises:
        CredentialFileParseError: If the YAML is malformed or does not describe
            a kubeconfig document.
    """
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        msg = f"Kubeconfig {source} is not valid YAML: {exc}"
        raise CredentialFileParseError(msg) from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        msg = f"Kubeconfig {source} must be a mapping, got {type(raw).__name__}."
        raise CredentialFileParseError(msg)

    try:
        return KubeConfig.model_validate(raw)
    except ValidationError as exc:
        msg = f"Kubeconfig {source} has an invalid structure: {exc}"
        raise CredentialFileParseError(msg) from exc


class KubeconfigProbe:
    """Read the current context's cluster and user from a kubeconfig file."""

    def __init__(self, sources: ProbeSources) -> None:
        self._sources = sources

    def location(self) -> str:
        """Return the kubeconfig path: the ``kubeconfig`` override, else ``~/.kube/config``."""
        override = self._sources.lookup(KUBECONFIG_PROPERTY)
        if override:
            return override
        return str(self._sources.home / DEFAULT_KUBECONFIG_PATH)

    def probe(self) -> dict[str, Any]:
        """Return candidate values from the current context.

        A resolved cluster or user replaces every field it governs, so keys
        missing from the kubeconfig clear earlier candidates. A missing or
        unparseable file contributes nothing.
        """
        path = self.location()
        if not self._sources.filesystem.is_file(path):
            return {}

        try:
            kubeconfig = self._load(path)
        except CredentialFileParseError as exc:
            log.error("kubeconfig_parse_failed", path=path, error=str(exc))
            return {}

        context = kubeconfig.get_current_context()
        if context is None:
            log.warning("kubeconfig_context_missing", path=path, context=kubeconfig.current_context)
            return {}

        cluster = kubeconfig.get_cluster(context)
        if cluster is None:
            log.warning("kubeconfig_cluster_missing", path=path, cluster=context.cluster)
            return {}

        base_dir = Path(path).parent
        values = self._cluster_values(cluster, base_dir, self._sources.home)
        auth_info = kubeconfig.get_user_auth_info(context)
        if auth_info is None:
            log.warning("kubeconfig_user_missing", path=path, user=context.user)
        else:
            values.update(self._user_values(auth_info, base_dir, self._sources.home))
        return values

    def _load(self, path: str) -> KubeConfig:
        try:
            text = self._sources.filesystem.read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Could not read kubeconfig {path}: {exc}"
            raise CredentialFileParseError(msg) from exc
        return parse_kubeconfig(text, source=path)

    @staticmethod
    def _cluster_values(cluster: Cluster, base_dir: Path, home: Path) -> dict[str, Any]:
        return {
            "master_url": cluster.server,
            "trust_certs": bool(cluster.insecure_skip_tls_verify),
            "ca_cert_file": _resolve_path(cluster.certificate_authority, base_dir, home),
            "ca_cert_data": cluster.certificate_authority_data,
        }

    @staticmethod
    def _user_values(auth_info: AuthInfo, base_dir: Path, home: Path) -> dict[str, Any]:
        return {
            "client_cert_file": _resolve_path(auth_info.client_certificate, base_dir, home),
            "client_cert_data": auth_info.client_certificate_data,
            "client_key_file": _resolve_path(auth_info.client_key, base_dir, home),
            "client_key_data": auth_info.client_key_data,
            "oauth_token": auth_info.token,
            "username": auth_info.username,
            "password": auth_info.password,
        }


def _resolve_path(value: str | None, base_dir: Path, home: Path) -> str | None:
    """Resolve a kubeconfig file reference relative to the kubeconfig's directory.

    A leading ``~`` expands to ``home``.
    """
    if not value:
        return value
    if value == "~" or value.startswith("~/"):
        path = home / value[2:]
    else:
        path = Path(value)
    if path.is_absolute():
        return str(path)
    return str(base_dir / path)
