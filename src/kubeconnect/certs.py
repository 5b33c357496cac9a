"""Load trust anchors and client identities from file paths or inline base64 data."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from kubeconnect.errors import CredentialMaterialError
from kubeconnect.sources import Filesystem, LocalFilesystem

DEFAULT_KEY_ALGO = "RSA"
# Well-known placeholder kept for compatibility; warned about when used.
DEFAULT_KEY_PASSPHRASE = "changeit"

CLIENT_KEY_ALIAS = "client"

_PEM_MARKER = b"-----BEGIN"

_KEY_TYPES: dict[str, type] = {
    "RSA": rsa.RSAPrivateKey,
    "EC": ec.EllipticCurvePrivateKey,
    "ECDSA": ec.EllipticCurvePrivateKey,
    "DSA": dsa.DSAPrivateKey,
    "ED25519": ed25519.Ed25519PrivateKey,
    "ED448": ed448.Ed448PrivateKey,
}


@dataclass(frozen=True)
class TrustStore:
    """Trust anchors keyed by deterministic aliases (``ca-0``, ``ca-1``, ...)."""

    entries: dict[str, x509.Certificate]

    def aliases(self) -> list[str]:
        return list(self.entries)

    def pem(self) -> str:
        """All anchors concatenated as PEM, the form ``ssl`` accepts as ``cadata``."""
        return "".join(cert.public_bytes(serialization.Encoding.PEM).decode("ascii") for cert in self.entries.values())


@dataclass(frozen=True)
class KeyStore:
    """A single private key plus its certificate chain, protected by a passphrase."""

    alias: str
    private_key: PrivateKeyTypes
    chain: tuple[x509.Certificate, ...]
    passphrase: str

    def pem_chain(self) -> bytes:
        return b"".join(cert.public_bytes(serialization.Encoding.PEM) for cert in self.chain)

    def encrypted_key_pem(self) -> bytes:
        """The private key as PKCS#8 PEM, encrypted with the passphrase when one is set."""
        encryption: serialization.KeySerializationEncryption
        if self.passphrase:
            encryption = serialization.BestAvailableEncryption(self.passphrase.encode("utf-8"))
        else:
            encryption = serialization.NoEncryption()
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=encryption,
        )


def load_material(
    file_path: str | None,
    inline_data: str | None,
    *,
    label: str = "certificate",
    filesystem: Filesystem | None = None,
) -> bytes | None:
    """Return the raw bytes of a piece of certificate material.

    The file path takes precedence: when both are given the inline data is
    ignored. Inline data is base64-decoded.

    Args:
        file_path: Path to a PEM or DER file.
        inline_data: Base64-encoded content.
        label: Human-readable name used in error messages.
        filesystem: Filesystem to read from; the local disk by default.

    Returns:
        The decoded bytes, or None if neither source was supplied.

    Raises:
        CredentialMaterialError: If the file cannot be read or the inline data
            is not valid base64.
    """
    if file_path:
        fs = filesystem or LocalFilesystem()
        try:
            return fs.read_bytes(file_path)
        except OSError as exc:
            msg = f"Could not read {label} file {file_path!r}: {exc}"
            raise CredentialMaterialError(msg) from exc

    if inline_data:
        try:
            return base64.b64decode("".join(inline_data.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            msg = f"Inline {label} data is not valid base64: {exc}"
            raise CredentialMaterialError(msg) from exc

    return None


def load_certificates(data: bytes, label: str = "certificate") -> list[x509.Certificate]:
    """Parse a PEM bundle or a single DER certificate."""
    try:
        if _PEM_MARKER in data:
            return x509.load_pem_x509_certificates(data)
        return [x509.load_der_x509_certificate(data)]
    except ValueError as exc:
        msg = f"Could not parse {label}: {exc}"
        raise CredentialMaterialError(msg) from exc


def load_private_key(data: bytes, passphrase: str | None = None) -> PrivateKeyTypes:
    """Parse a PEM or DER private key, decrypting it with ``passphrase`` if it is encrypted."""
    loader = serialization.load_pem_private_key if _PEM_MARKER in data else serialization.load_der_private_key
    try:
        return loader(data, password=None)
    except TypeError:
        if not passphrase:
            msg = "Client key is encrypted and no passphrase was configured."
            raise CredentialMaterialError(msg) from None
    except (ValueError, UnsupportedAlgorithm) as exc:
        msg = f"Could not parse client key: {exc}"
        raise CredentialMaterialError(msg) from exc

    try:
        return loader(data, password=passphrase.encode("utf-8"))
    except (TypeError, ValueError, UnsupportedAlgorithm) as exc:
        msg = f"Could not decrypt client key with the configured passphrase: {exc}"
        raise CredentialMaterialError(msg) from exc


def create_trust_store(
    ca_cert_file: str | None,
    ca_cert_data: str | None,
    *,
    filesystem: Filesystem | None = None,
) -> TrustStore | None:
    """Build a trust store from CA material, or return None if none was supplied.

    Raises:
        CredentialMaterialError: If the material is unreadable or contains no
            parseable certificate.
    """
    data = load_material(ca_cert_file, ca_cert_data, label="CA certificate", filesystem=filesystem)
    if data is None:
        return None
    certificates = load_certificates(data, label="CA certificate")
    return TrustStore(entries={f"ca-{index}": cert for index, cert in enumerate(certificates)})


def create_key_store(
    client_cert_file: str | None,
    client_cert_data: str | None,
    client_key_file: str | None,
    client_key_data: str | None,
    client_key_algo: str = DEFAULT_KEY_ALGO,
    client_key_passphrase: str = DEFAULT_KEY_PASSPHRASE,
    *,
    filesystem: Filesystem | None = None,
) -> KeyStore | None:
    """Build a key store from a client certificate and key.

    A certificate without a key (or the reverse) yields None rather than an
    error.

    Raises:
        CredentialMaterialError: If the algorithm is unsupported, the material
            is malformed, or the key does not match ``client_key_algo``.
    """
    cert_bytes = load_material(client_cert_file, client_cert_data, label="client certificate", filesystem=filesystem)
    key_bytes = load_material(client_key_file, client_key_data, label="client key", filesystem=filesystem)
    if cert_bytes is None or key_bytes is None:
        return None

    expected_type = _KEY_TYPES.get(client_key_algo.upper())
    if expected_type is None:
        valid = ", ".join(sorted(_KEY_TYPES))
        msg = f"Unsupported client key algorithm {client_key_algo!r}. Must be one of: {valid}"
        raise CredentialMaterialError(msg)

    chain = load_certificates(cert_bytes, label="client certificate")
    private_key = load_private_key(key_bytes, client_key_passphrase)
    if not isinstance(private_key, expected_type):
        msg = f"Client key is a {type(private_key).__name__}, not a {client_key_algo} key."
        raise CredentialMaterialError(msg)

    return KeyStore(
        alias=CLIENT_KEY_ALIAS,
        private_key=private_key,
        chain=tuple(chain),
        passphrase=client_key_passphrase,
    )
