"""Command line diagnostics for configuration resolution."""

from __future__ import annotations

import json
import logging
from typing import Any

import typer

from kubeconnect.auth import select_scheme
from kubeconnect.client import ClusterClient
from kubeconnect.config import ConfigBuilder, ResolvedConfig
from kubeconnect.errors import KubeConnectError
from kubeconnect.log_config import configure_logging
from kubeconnect.tls import needs_custom_context

app = typer.Typer(help="Inspect how kubeconnect resolves cluster access.", no_args_is_help=True)


def summarize(config: ResolvedConfig) -> dict[str, Any]:
    """Describe a resolved configuration without exposing secrets."""
    if config.trust_certs:
        tls_mode = "insecure"
    elif needs_custom_context(config):
        tls_mode = "custom"
    else:
        tls_mode = "default"
    return {
        "master_url": config.master_url,
        "extended_api_url": config.extended_api_url,
        "auth": select_scheme(config).value,
        "tls": tls_mode,
        "client_identity": config.has_client_identity,
        "config": config.redacted(),
    }


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution details to stderr"),
) -> None:
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


@app.command("describe")
def describe(
    master: str | None = typer.Option(None, "--master", help="Override the master URL"),
    insecure: bool = typer.Option(False, "--insecure", help="Skip server certificate verification"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of text"),
) -> None:
    """Resolve configuration from this environment and print the result."""
    try:
        builder = ConfigBuilder()
        if master:
            builder.master_url(master)
        if insecure:
            builder.trust_certs(True)
        with ClusterClient(builder.build()) as client:
            summary = summarize(client.config)
    except KubeConnectError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(json.dumps(summary, indent=2, sort_keys=True))
        return
    for key, value in summary.items():
        if key == "config":
            continue
        typer.echo(f"{key}: {value}")
