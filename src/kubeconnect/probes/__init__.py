"""Implicit credential discovery: in-cluster service account and local kubeconfig.

Each probe returns a mapping of configuration field to candidate value. The
resolver applies them in order, so later probes win.
"""

from __future__ import annotations

from kubeconnect.probes.kubeconfig import KubeconfigProbe
from kubeconnect.probes.service_account import ServiceAccountProbe

__all__ = ["KubeconfigProbe", "ServiceAccountProbe"]
