"""Cluster provisioning."""

from __future__ import annotations

from .config import ClusterConfig
from .ssh import prepare_nodes


def bootstrap_cluster(config: ClusterConfig) -> None:
    """Prepare every node in ``config`` and initialise the cluster."""
    prepare_nodes(config)