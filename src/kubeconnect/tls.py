"""Build the ``ssl.SSLContext`` for a resolved configuration."""

from __future__ import annotations

import ssl
import tempfile
from collections.abc import Iterable
from pathlib import Path

import structlog

from kubeconnect.certs import DEFAULT_KEY_PASSPHRASE, KeyStore, create_key_store, create_trust_store
from kubeconnect.config import ResolvedConfig
from kubeconnect.errors import TLSBootstrapError
from kubeconnect.sources import Filesystem

log = structlog.get_logger()

MINIMUM_TLS_VERSION = ssl.TLSVersion.TLSv1_2

_PROTOCOL_VERSIONS: dict[str, ssl.TLSVersion] = {
    "TLSv1": ssl.TLSVersion.TLSv1,
    "TLSv1.1": ssl.TLSVersion.TLSv1_1,
    "TLSv1.2": ssl.TLSVersion.TLSv1_2,
    "TLSv1.3": ssl.TLSVersion.TLSv1_3,
}


def needs_custom_context(config: ResolvedConfig) -> bool:
    """True when CA material, a complete client identity, or insecure trust is configured."""
    return config.has_ca_material or config.has_client_identity or config.trust_certs


def build_ssl_context(
    config: ResolvedConfig,
    *,
    filesystem: Filesystem | None = None,
) -> ssl.SSLContext | None:
    """Create the TLS context for ``config``.

    Returns None when nothing custom is configured, leaving the transport on the
    platform's default verification.

    With ``trust_certs`` set, server certificate and hostname verification are
    disabled entirely, whether or not CA material is present.

    Raises:
        CredentialMaterialError: If CA or client material is unreadable or malformed.
        TLSBootstrapError: If a protocol name is unknown or OpenSSL rejects the material.
    """
    if not needs_custom_context(config):
        return None

    trust_store = None
    if config.has_ca_material:
        trust_store = create_trust_store(config.ca_cert_file, config.ca_cert_data, filesystem=filesystem)

    key_store = None
    if config.has_client_identity:
        key_store = create_key_store(
            config.client_cert_file,
            config.client_cert_data,
            config.client_key_file,
            config.client_key_data,
            config.client_key_algo,
            config.client_key_passphrase,
            filesystem=filesystem,
        )

    try:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        apply_protocols(context, config.enabled_protocols)
        if trust_store is not None:
            context.load_verify_locations(cadata=trust_store.pem())
        else:
            context.load_default_certs()
        if key_store is not None:
            _load_key_store(context, key_store)
    except ssl.SSLError as exc:
        msg = f"Could not initialise TLS context: {exc}"
        raise TLSBootstrapError(msg) from exc

    if config.trust_certs:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        log.warning("insecure_trust_enabled", master_url=config.master_url)
    return context


def apply_protocols(context: ssl.SSLContext, protocols: Iterable[str]) -> None:
    """Narrow ``context`` to the span of ``protocols``, never below TLS 1.2.

    Raises:
        TLSBootstrapError: If a protocol name is unknown or the list is empty.
    """
    versions = []
    for name in protocols:
        version = _PROTOCOL_VERSIONS.get(name.strip())
        if version is None:
            valid = ", ".join(_PROTOCOL_VERSIONS)
            msg = f"Unsupported TLS protocol {name!r}. Must be one of: {valid}"
            raise TLSBootstrapError(msg)
        versions.append(version)
    if not versions:
        msg = "No TLS protocols enabled."
        raise TLSBootstrapError(msg)

    context.minimum_version = max(min(versions), MINIMUM_TLS_VERSION)
    context.maximum_version = max(max(versions), MINIMUM_TLS_VERSION)


def _load_key_store(context: ssl.SSLContext, key_store: KeyStore) -> None:
    # ssl only loads identities from files; the key is written encrypted and
    # the directory is removed before returning.
    if key_store.passphrase == DEFAULT_KEY_PASSPHRASE:
        log.warning("default_key_passphrase_in_use", alias=key_store.alias)

    with tempfile.TemporaryDirectory(prefix="kubeconnect-") as tmp_dir:
        cert_path = Path(tmp_dir) / f"{key_store.alias}.crt"
        key_path = Path(tmp_dir) / f"{key_store.alias}.key"
        cert_path.write_bytes(key_store.pem_chain())
        key_path.touch(mode=0o600)
        key_path.write_bytes(key_store.encrypted_key_pem())
        context.load_cert_chain(cert_path, key_path, password=key_store.passphrase or None)
