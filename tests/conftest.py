"""Shared test fixtures: fake filesystem, probe sources and generated certificates."""

from __future__ import annotations

import base64
import datetime
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest
import structlog
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from kubeconnect.sources import ProbeSources


class FakeFilesystem:
    """In-memory ``Filesystem``; missing paths raise ``FileNotFoundError``."""

    def __init__(self, files: dict[str, bytes | str] | None = None) -> None:
        self.files: dict[str, bytes] = {}
        for path, content in (files or {}).items():
            self.add(path, content)
        self.unreadable: set[str] = set()

    def add(self, path: str, content: bytes | str) -> None:
        self.files[path] = content.encode("utf-8") if isinstance(content, str) else content

    def is_file(self, path: str) -> bool:
        return path in self.files

    def read_bytes(self, path: str) -> bytes:
        if path in self.unreadable:
            raise PermissionError(13, "Permission denied", path)
        if path not in self.files:
            raise FileNotFoundError(2, "No such file or directory", path)
        return self.files[path]

    def read_text(self, path: str) -> str:
        return self.read_bytes(path).decode("utf-8")


HOME = Path("/home/tester")
KUBECONFIG_PATH = str(HOME / ".kube" / "config")


def _make_sources(
    files: dict[str, bytes | str] | None = None,
    environ: dict[str, str] | None = None,
    properties: dict[str, str] | None = None,
) -> ProbeSources:
    """Build isolated probe sources backed by a ``FakeFilesystem``."""
    return ProbeSources(
        properties=properties or {},
        environ=environ or {},
        filesystem=FakeFilesystem(files),
        home=HOME,
    )


@dataclass(frozen=True)
class CertBundle:
    """A generated certificate and its private key, in PEM form."""

    cert_pem: bytes
    key_pem: bytes

    @property
    def cert_b64(self) -> str:
        return base64.b64encode(self.cert_pem).decode("ascii")

    @property
    def key_b64(self) -> str:
        return base64.b64encode(self.key_pem).decode("ascii")

    def write(self, directory: Path, name: str) -> tuple[Path, Path]:
        cert_path = directory / f"{name}.crt"
        key_path = directory / f"{name}.key"
        cert_path.write_bytes(self.cert_pem)
        key_path.write_bytes(self.key_pem)
        return cert_path, key_path


def _make_cert(common_name: str = "localhost", key_type: str = "rsa") -> CertBundle:
    """Create a self-signed certificate valid for ``localhost``."""
    if key_type == "ec":
        key = ec.generate_private_key(ec.SECP256R1())
    else:
        key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName("localhost")]), critical=False)
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return CertBundle(cert_pem=cert.public_bytes(serialization.Encoding.PEM), key_pem=key_pem)


@pytest.fixture
def make_sources() -> Callable[..., ProbeSources]:
    """Factory for isolated probe sources: ``make_sources(files=..., environ=..., properties=...)``."""
    return _make_sources


@pytest.fixture
def kubeconfig_path() -> str:
    """Where the kubeconfig probe looks by default under the fake home directory."""
    return KUBECONFIG_PATH


@pytest.fixture(scope="session")
def rsa_cert() -> CertBundle:
    return _make_cert("kubeconnect-test")


@pytest.fixture(scope="session")
def other_rsa_cert() -> CertBundle:
    return _make_cert("kubeconnect-other")


@pytest.fixture(scope="session")
def ec_cert() -> CertBundle:
    return _make_cert("kubeconnect-ec", key_type="ec")


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo any ``structlog.configure`` a test (for example the CLI) performs."""
    yield
    structlog.reset_defaults()
