"""In-cluster service account probe."""

from __future__ import annotations

from typing import Any

import structlog

from kubeconnect.errors import ProbeIOError
from kubeconnect.sources import ProbeSources

log = structlog.get_logger()

SERVICE_ACCOUNT_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"
SERVICE_ACCOUNT_CA_CRT_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/ca.crt"


class ServiceAccountProbe:
    """Detect the credentials Kubernetes mounts into every pod.

    The probe never raises: a missing or unreadable token simply means no
    service account identity is available.
    """

    def __init__(
        self,
        sources: ProbeSources,
        *,
        token_path: str = SERVICE_ACCOUNT_TOKEN_PATH,
        ca_cert_path: str = SERVICE_ACCOUNT_CA_CRT_PATH,
    ) -> None:
        self._sources = sources
        self._token_path = token_path
        self._ca_cert_path = ca_cert_path

    def probe(self) -> dict[str, Any]:
        """Return ``ca_cert_file`` and ``oauth_token`` candidates where present."""
        values: dict[str, Any] = {}
        if self._sources.filesystem.is_file(self._ca_cert_path):
            values["ca_cert_file"] = self._ca_cert_path

        try:
            values["oauth_token"] = self._read_token()
        except ProbeIOError as exc:
            log.debug("service_account_token_unavailable", path=self._token_path, error=str(exc))
        return values

    def _read_token(self) -> str:
        try:
            return self._sources.filesystem.read_text(self._token_path)
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Could not read service account token {self._token_path}: {exc}"
            raise ProbeIOError(msg) from exc
