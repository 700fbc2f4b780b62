"""Remote preparation of cluster nodes over SSH."""

from __future__ import annotations

import getpass
import io
import sys
from pathlib import Path

import paramiko

from .config import ClusterConfig, NodeConfig

DEFAULT_SSH_PORT = 22
BINARY_DIR = "/usr/local/bin/"
KUBE_BINARIES = ("kubeadm", "kubelet")


class RemoteCommandError(Exception):
    """A command on a node exited with a non-zero status."""

    def __init__(self, command, exit_status, stderr="", message=None):
        self.command = command
        self.exit_status = exit_status
        self.stderr = stderr
        super().__init__(message or f"Process exited with status {exit_status}")


class NodeSession:
    """Runs commands on one node through an open SSH client."""

    def __init__(self, client):
        self._client = client

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def close(self):
        self._client.close()

    def _run(self, command, stdin_data=None):
        stdin, stdout, stderr = self._client.exec_command(command)
        if stdin_data is not None:
            stdin.write(stdin_data)
            stdin.flush()
        stdin.channel.shutdown_write()
        out = stdout.read()
        err = stderr.read()
        status = stdout.channel.recv_exit_status()
        return status, out, err

    def execute(self, command):
        """Run ``command`` and return its standard output as bytes."""
        status, out, err = self._run(command)
        if status != 0:
            raise RemoteCommandError(
                command, status, err.decode("utf-8", errors="replace")
            )
        return out

    def check_swap(self):
        """Tell whether any swap device is active."""
        return bool(self.execute("swapon --show").strip())

    def check_packet_forwarding(self):
        """Tell whether IPv4 packet forwarding is enabled."""
        out = self.execute("sysctl net.ipv4.ip_forward")
        # The value is the last character before the trailing newline.
        return out[-2:-1] == b"1"

    def enable_packet_forwarding(self, password):
        """Persist and apply ``net.ipv4.ip_forward=1``."""
        try:
            self.run_with_sudo(
                password,
                "sudo -S tee /etc/sysctl.d/k8s.conf > /dev/null",
                "net.ipv4.ip_forward=1\n",
            )
        except RemoteCommandError as exc:
            raise RemoteCommandError(
                exc.command,
                exc.exit_status,
                exc.stderr,
                f"failed to set sysctl packet forwarding params: {exc}",
            ) from exc
        try:
            self.run_with_sudo(password, "sudo -S sysctl --system", "")
        except RemoteCommandError as exc:
            raise RemoteCommandError(
                exc.command,
                exc.exit_status,
                exc.stderr,
                f"failed to apply sysctl params: {exc}",
            ) from exc

    def install_kubeadm(self, version):
        """Download the kubeadm and kubelet binaries when they are missing."""
        arch = self.execute("uname -m").decode().strip()
        if arch == "aarch64":
            arch = "arm64"
        for binary in KUBE_BINARIES:
            if self.check_file(BINARY_DIR + binary):
                continue
            self.execute(
                "wget --quiet --show-progress --https-only --retry-connrefused "
                "--waitretry=2 --tries=5 "
                f"https://dl.k8s.io/release/{version}/bin/linux/{arch}/{binary} "
                f"-O {binary}"
            )

    def check_file(self, filename):
        """Tell whether ``filename`` exists on the node."""
        try:
            self.execute(f"stat {filename}")
        except RemoteCommandError:
            return False
        return True

    def kubeadm_init(self, pod_cidr, password):
        """Run ``kubeadm init`` with the given pod network; return its output."""
        out = self.run_with_sudo(
            password, f"sudo -S kubeadm init --pod-network-cidr {pod_cidr}"
        )
        print(out)
        return out

    def run_with_sudo(self, password, command, *args):
        """Run a ``sudo -S`` command, feeding the password and extra input."""
        stdin_data = password + "\n" + "".join(args)
        status, out, err = self._run(command, stdin_data)
        stderr = err.decode("utf-8", errors="replace")
        if status != 0:
            raise RemoteCommandError(
                command,
                status,
                stderr,
                "failed to run remote with sudo: "
                f"Process exited with status {status}\nstderr: {stderr}",
            )
        return out.decode("utf-8", errors="replace")


def prompt_sudo_password():
    """Ask for the sudo password without echoing it."""
    return getpass.getpass("Enter your sudo password: ")


def resolve_key_path(path):
    """Expand a leading ``~/`` to the user's home directory."""
    if path.startswith("~/"):
        return str(Path.home() / path[2:])
    return path


def _load_private_key(path):
    text = Path(path).read_text()
    for key_class in (paramiko.Ed25519Key, paramiko.ECDSAKey, paramiko.RSAKey):
        try:
            return key_class.from_private_key(io.StringIO(text))
        except (paramiko.SSHException, ValueError):
            continue
    raise paramiko.SSHException(f"unable to parse private key {path}")


def connect(node: NodeConfig) -> NodeSession:
    """Open an SSH session to ``node`` using its private key."""
    key = _load_private_key(resolve_key_path(node.ssh_key_path))
    client = paramiko.SSHClient()
    client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
    client.connect(
        hostname=node.address,
        port=node.port or DEFAULT_SSH_PORT,
        username=node.user,
        pkey=key,
        allow_agent=False,
        look_for_keys=False,
    )
    return NodeSession(client)


def prepare_nodes(config: ClusterConfig) -> None:
    """Check and prepare every node, then run ``kubeadm init`` on it."""
    for node in config.nodes:
        with connect(node) as session:
            hostname = session.execute("hostname").decode().strip()
            if session.check_swap():
                print(
                    f"Please disable swap on the machine at {node.address} ({hostname})",
                    file=sys.stderr,
                )
            try:
                forwarding = session.check_packet_forwarding()
            except (RemoteCommandError, paramiko.SSHException):
                forwarding = False
            if not forwarding:
                print("Need to enable packet forwarding")
                session.enable_packet_forwarding(prompt_sudo_password())
            session.install_kubeadm(config.kubernetes_version)
            session.kubeadm_init(config.pod_cidr, prompt_sudo_password())