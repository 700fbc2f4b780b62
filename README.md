# iotkube

Opinionated Kubernetes provisioning for edge, IoT and resilient data platforms.

`iotkube` reads a cluster description from a YAML file. It checks that the
requested Kubernetes version is one of the tags listed by the Kubernetes
project's GitHub tags endpoint. The match ignores case. It then connects to
each node over SSH and gets the node ready for `kubeadm`. For each node it:

- warns on standard error when swap is enabled (it does not turn swap off),
- turns on IPv4 packet forwarding if it is off, by writing
  `/etc/sysctl.d/k8s.conf` and running `sysctl --system`,
- downloads `kubeadm` and `kubelet` for the node's architecture with `wget`
  when they are missing from `/usr/local/bin`. The files are saved in the
  remote user's working directory and are not moved or installed as services.
- runs `sudo kubeadm init --pod-network-cidr <pod_cidr>` and prints its output.

The sudo steps ask for the sudo password at the terminal. The password is not
echoed. You are asked once for packet forwarding, if it is needed, and once for
`kubeadm init`.

The SSH connection uses the node's private key. The key can be Ed25519, ECDSA
or RSA, and it must not have a passphrase. A leading `~/` in the key path is
expanded to your home directory. Host keys are accepted without checking.

## Installation

```
pip install .
```

## Configuration

```yaml
nodes:
  - address: 192.0.2.10
    port: 22              # optional, 0 or missing means 22
    user: pi
    ssh_key_path: ~/.ssh/id_ed25519
    role: control-plane
networking:
  pod_cidr: 10.244.0.0/16
kubernetes:
  version: v1.33.0
extensions: []
```

## Usage

Print the parsed configuration without touching any node. The Kubernetes
version is still checked online.

```
iotkube create-cluster -f cluster.yaml --dry-run
```

Provision the cluster:

```
iotkube create-cluster -f cluster.yaml
```

Errors are printed as `Error: ...` and the command exits with status 1.

## What it does not do

The `install` command accepts `--dry-run` and `-n/--namespace`, but it only
prints its own help. It does not install extensions or Helm releases. The
`extensions` and `role` fields are read and shown by `--dry-run`, but nothing
acts on them. The package does not join worker nodes, install a container
runtime or set up a pod network add-on.

## Library use

```python
from iotkube.config import parse, to_yaml
from iotkube.cluster import bootstrap_cluster

with open("cluster.yaml") as stream:
    config = parse(stream)          # fetches the tag list online
print(to_yaml(config))
bootstrap_cluster(config)
```

Pass `tags=` to `parse` to check against your own list of version names
instead of fetching it:

```python
config = parse(open("cluster.yaml"), tags=["v1.33.0"])
```

If the configuration cannot be read, is invalid or names an unknown version,
`parse` raises `iotkube.config.ConfigError`. If a command fails on a node,
`iotkube.ssh.RemoteCommandError` is raised. It carries `command`,
`exit_status` and `stderr`.

`iotkube.ssh.connect(node)` returns a `NodeSession`, which is a context manager.
It has `execute`, `check_swap`, `check_packet_forwarding`,
`enable_packet_forwarding`, `install_kubeadm`, `check_file`, `kubeadm_init` and
`run_with_sudo` for running single steps yourself.

## Development

```
pip install -e ".[test]"
pytest
```