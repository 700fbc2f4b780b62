"""Cluster configuration: loading, validation and YAML output."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from typing import IO, Any, Iterable

import yaml

TAGS_URL = "https://api.github.com/repos/kubernetes/kubernetes/tags"
DEFAULT_TIMEOUT = 10.0


class ConfigError(Exception):
    """Raised when a cluster configuration cannot be loaded or is invalid."""


def _scalar(value: Any, name: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ConfigError(f"field {name!r} must be a scalar value")
    return str(value)


def _mapping(value: Any, name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"field {name!r} must be a mapping")
    return value


@dataclass
class NodeConfig:
    """Connection details and role of one machine in the cluster."""

    address: str
    user: str
    ssh_key_path: str
    role: str
    port: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "NodeConfig":
        data = _mapping(data, "nodes[]")
        port = data.get("port", 0)
        if port is None:
            port = 0
        if isinstance(port, bool) or not isinstance(port, int):
            raise ConfigError(f"node port must be an integer, got {port!r}")
        if not -(2**31) <= port < 2**31:
            raise ConfigError(f"node port {port} out of range")
        return cls(
            address=_scalar(data.get("address"), "address"),
            user=_scalar(data.get("user"), "user"),
            ssh_key_path=_scalar(data.get("ssh_key_path"), "ssh_key_path"),
            role=_scalar(data.get("role"), "role"),
            port=port,
        )

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "port": self.port,
            "user": self.user,
            "ssh_key_path": self.ssh_key_path,
            "role": self.role,
        }


@dataclass
class ClusterConfig:
    """The whole cluster description as read from the config file."""

    nodes: list[NodeConfig] = field(default_factory=list)
    pod_cidr: str = ""
    kubernetes_version: str = ""
    extensions: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ClusterConfig":
        data = _mapping(data, "document")
        nodes = data.get("nodes") or []
        if not isinstance(nodes, list):
            raise ConfigError("field 'nodes' must be a list")
        extensions = data.get("extensions") or []
        if not isinstance(extensions, list):
            raise ConfigError("field 'extensions' must be a list")
        networking = _mapping(data.get("networking"), "networking")
        kubernetes = _mapping(data.get("kubernetes"), "kubernetes")
        return cls(
            nodes=[NodeConfig.from_dict(node) for node in nodes],
            pod_cidr=_scalar(networking.get("pod_cidr"), "pod_cidr"),
            kubernetes_version=_scalar(kubernetes.get("version"), "version"),
            extensions=[_scalar(ext, "extensions[]") for ext in extensions],
        )

    def to_dict(self) -> dict:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "networking": {"pod_cidr": self.pod_cidr},
            "kubernetes": {"version": self.kubernetes_version},
            "extensions": list(self.extensions),
        }


def fetch_tags(timeout: float = DEFAULT_TIMEOUT) -> list[str]:
    """Return the names of the published Kubernetes release tags."""
    request = urllib.request.Request(
        TAGS_URL, headers={"Accept": "application/vnd.github+json"}
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            body = response.read()
    except (urllib.error.URLError, OSError) as exc:
        raise ConfigError(f"failed to fetch Kubernetes versions: {exc}") from exc
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise ConfigError(f"invalid version list: {exc}") from exc
    if not isinstance(payload, list):
        raise ConfigError("invalid version list: expected a JSON array")
    return [
        str(item.get("name", "")) for item in payload if isinstance(item, dict)
    ]


def check_version(version: str, tags: Iterable[str]) -> bool:
    """Tell whether ``version`` names one of ``tags``, ignoring case."""
    wanted = version.lower()
    return any(tag.lower() == wanted for tag in tags)


def parse(stream: IO[str] | str, tags: Iterable[str] | None = None) -> ClusterConfig:
    """Load a cluster config and make sure its Kubernetes version exists.

    When ``tags`` is not given, the list of versions is fetched remotely.
    """
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}") from exc
    if data is None:
        raise ConfigError("empty configuration")
    config = ClusterConfig.from_dict(data)

    if tags is None:
        tags = fetch_tags()
    if not check_version(config.kubernetes_version, tags):
        raise ConfigError(
            f'kubernetes version "{config.kubernetes_version}" not found'
        )
    return config


def to_yaml(value: Any) -> str:
    """Render a config object, or plain data, as YAML text."""
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    return yaml.safe_dump(value, sort_keys=False, default_flow_style=False)


def print_yaml(value: Any) -> None:
    """Print ``value`` as YAML, or report why it cannot be rendered."""
    try:
        out = to_yaml(value)
    except yaml.YAMLError as exc:
        print("error marshaling YAML:", exc)
        return
    print(out)