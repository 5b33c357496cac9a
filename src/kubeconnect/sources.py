"""Where probes read from: property mapping, environment, filesystem and home directory.

Passing a ``ProbeSources`` into the resolver keeps probing free of hidden
process-global state, so tests can swap in fakes.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from kubeconnect.utils import parse_bool


def property_to_env_var(name: str) -> str:
    """Derive the environment variable name for a dotted property name.

    ``kubernetes.auth.tryKubeConfig`` becomes ``KUBERNETES_AUTH_TRYKUBECONFIG``.
    """
    return name.upper().replace(".", "_")


class Filesystem(Protocol):
    """Minimal read-only filesystem used by the probes and the certificate loader."""

    def is_file(self, path: str) -> bool: ...

    def read_bytes(self, path: str) -> bytes: ...

    def read_text(self, path: str) -> str: ...


class LocalFilesystem:
    """``Filesystem`` backed by the real local disk."""

    def is_file(self, path: str) -> bool:
        return Path(path).is_file()

    def read_bytes(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")


@dataclass(frozen=True)
class ProbeSources:
    """Everything configuration resolution is allowed to look at."""

    properties: Mapping[str, str] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=dict)
    filesystem: Filesystem = field(default_factory=LocalFilesystem)
    home: Path = field(default_factory=lambda: Path("."))

    @classmethod
    def from_process(cls, properties: Mapping[str, str] | None = None) -> ProbeSources:
        """Capture the current process environment and home directory."""
        return cls(
            properties=dict(properties or {}),
            environ=dict(os.environ),
            filesystem=LocalFilesystem(),
            home=Path.home(),
        )

    def lookup(self, name: str) -> str | None:
        """Return the property ``name`` if set, else its derived environment variable."""
        if name in self.properties:
            return self.properties[name]
        return self.environ.get(property_to_env_var(name))

    def lookup_bool(self, name: str, default: bool) -> bool:
        """Boolean lookup: only a case-insensitive ``"true"`` counts as true."""
        raw = self.lookup(name)
        if raw is None:
            return default
        return parse_bool(raw)
