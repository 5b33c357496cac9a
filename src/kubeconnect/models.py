"""Pydantic v2 models for the kubeconfig document."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _KubeConfigModel(BaseModel):
    """Shared settings: hyphenated kubeconfig keys map onto snake_case fields."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Cluster(_KubeConfigModel):
    server: str | None = None
    insecure_skip_tls_verify: bool | None = Field(default=None, alias="insecure-skip-tls-verify")
    certificate_authority: str | None = Field(default=None, alias="certificate-authority")
    certificate_authority_data: str | None = Field(default=None, alias="certificate-authority-data")


class NamedCluster(_KubeConfigModel):
    name: str
    cluster: Cluster = Field(default_factory=Cluster)


class Context(_KubeConfigModel):
    cluster: str | None = None
    user: str | None = None
    namespace: str | None = None


class NamedContext(_KubeConfigModel):
    name: str
    context: Context = Field(default_factory=Context)


class AuthInfo(_KubeConfigModel):
    client_certificate: str | None = Field(default=None, alias="client-certificate")
    client_certificate_data: str | None = Field(default=None, alias="client-certificate-data")
    client_key: str | None = Field(default=None, alias="client-key")
    client_key_data: str | None = Field(default=None, alias="client-key-data")
    token: str | None = None
    username: str | None = None
    password: str | None = None


class NamedAuthInfo(_KubeConfigModel):
    name: str
    user: AuthInfo = Field(default_factory=AuthInfo)


class KubeConfig(_KubeConfigModel):
    """A parsed kubeconfig file.

    Only the parts needed to resolve the current context are modelled; unknown
    keys (``preferences``, ``extensions``, exec plugins) are ignored.
    """

    clusters: list[NamedCluster] = Field(default_factory=list)
    contexts: list[NamedContext] = Field(default_factory=list)
    users: list[NamedAuthInfo] = Field(default_factory=list)
    current_context: str | None = Field(default=None, alias="current-context")

    # `clusters:` with no entries is parsed by YAML as None.
    @field_validator("clusters", "contexts", "users", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def get_current_context(self) -> Context | None:
        """Return the context named by ``current-context``, if any."""
        if not self.current_context:
            return None
        for entry in self.contexts:
            if entry.name == self.current_context:
                return entry.context
        return None

    def get_cluster(self, context: Context) -> Cluster | None:
        """Return the cluster the given context points at."""
        for entry in self.clusters:
            if entry.name == context.cluster:
                return entry.cluster
        return None

    def get_user_auth_info(self, context: Context) -> AuthInfo | None:
        """Return the user credentials the given context points at."""
        for entry in self.users:
            if entry.name == context.user:
                return entry.user
        return None
