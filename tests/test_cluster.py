import paramiko
import pytest

from iotkube.cluster import bootstrap_cluster
from iotkube.config import ClusterConfig, NodeConfig


def _config(path):
    node = NodeConfig(
        address="192.0.2.20", user="pi", ssh_key_path=str(path), role="control-plane"
    )
    return ClusterConfig(nodes=[node], pod_cidr="10.244.0.0/16", kubernetes_version="v1.33.1")


def test_bootstrap_fails_on_missing_key(tmp_path):
    with pytest.raises(FileNotFoundError):
        bootstrap_cluster(_config(tmp_path / "nope"))


def test_bootstrap_fails_on_unreadable_key(tmp_path):
    key = tmp_path / "key"
    key.write_text("placeholder\n")
    with pytest.raises(paramiko.SSHException):
        bootstrap_cluster(_config(key))