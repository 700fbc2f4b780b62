import io
import json
from unittest.mock import patch

import pytest
import yaml

from iotkube.config import (
    ClusterConfig,
    ConfigError,
    NodeConfig,
    check_version,
    fetch_tags,
    parse,
    print_yaml,
    to_yaml,
)

SAMPLE = """
nodes:
  - address: 192.0.2.10
    port: 2222
    user: pi
    ssh_key_path: ~/.ssh/id_ed25519
    role: control-plane
  - address: 192.0.2.11
    user: pi
    ssh_key_path: /keys/worker
    role: worker
networking:
  pod_cidr: 10.244.0.0/16
kubernetes:
  version: v1.33.1
extensions:
  - longhorn
"""

TAGS = ["v1.33.0", "v1.33.1"]


class FakeResponse:
    def __init__(self, body):
        self._body = body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def read(self):
        return self._body


def test_parse_reads_all_fields():
    config = parse(io.StringIO(SAMPLE), tags=TAGS)
    assert config.kubernetes_version == "v1.33.1"
    assert config.pod_cidr == "10.244.0.0/16"
    assert config.extensions == ["longhorn"]
    assert config.nodes[0] == NodeConfig(
        address="192.0.2.10",
        user="pi",
        ssh_key_path="~/.ssh/id_ed25519",
        role="control-plane",
        port=2222,
    )
    assert config.nodes[1].port == 0


def test_version_check_ignores_case():
    config = parse(io.StringIO(SAMPLE.replace("v1.33.1", "V1.33.1")), tags=TAGS)
    assert config.kubernetes_version == "V1.33.1"


def test_unknown_version_is_rejected():
    with pytest.raises(ConfigError, match='kubernetes version "v1.33.1" not found'):
        parse(io.StringIO(SAMPLE), tags=["v1.30.0"])


def test_missing_version_is_rejected():
    with pytest.raises(ConfigError, match='kubernetes version "" not found'):
        parse("nodes: []\n", tags=TAGS)


def test_empty_document_is_rejected():
    with pytest.raises(ConfigError):
        parse(io.StringIO(""), tags=TAGS)


def test_invalid_yaml_is_rejected():
    with pytest.raises(ConfigError):
        parse("nodes: [unclosed\n", tags=TAGS)


def test_non_integer_port_is_rejected():
    with pytest.raises(ConfigError):
        ClusterConfig.from_dict({"nodes": [{"address": "a", "port": "ssh"}]})


def test_dict_round_trip():
    config = parse(SAMPLE, tags=TAGS)
    assert ClusterConfig.from_dict(config.to_dict()) == config


def test_to_yaml_round_trip():
    config = parse(SAMPLE, tags=TAGS)
    loaded = yaml.safe_load(to_yaml(config))
    assert loaded == config.to_dict()
    assert list(loaded) == ["nodes", "networking", "kubernetes", "extensions"]


def test_print_yaml_writes_document(capsys):
    config = parse(SAMPLE, tags=TAGS)
    print_yaml(config)
    out = capsys.readouterr().out
    assert yaml.safe_load(out) == config.to_dict()


def test_check_version():
    assert check_version("v1.33.0", TAGS) is True
    assert check_version("v1.29.0", TAGS) is False


def test_fetch_tags_returns_names():
    body = json.dumps(
        [{"name": "v1.33.1", "tarball_url": "x"}, {"name": "v1.33.0"}]
    ).encode()
    with patch("urllib.request.urlopen", return_value=FakeResponse(body)):
        assert fetch_tags() == ["v1.33.1", "v1.33.0"]


def test_fetch_tags_rejects_bad_json():
    with patch("urllib.request.urlopen", return_value=FakeResponse(b"{oops")):
        with pytest.raises(ConfigError):
            fetch_tags()


def test_parse_fetches_tags_when_not_given():
    body = json.dumps([{"name": "v1.33.1"}]).encode()
    with patch("urllib.request.urlopen", return_value=FakeResponse(body)):
        config = parse(SAMPLE)
    assert config.kubernetes_version == "v1.33.1"