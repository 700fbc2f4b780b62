"""Command-line interface."""

from __future__ import annotations

import argparse
import sys

import paramiko

from .cluster import bootstrap_cluster
from .config import ConfigError, parse, print_yaml
from .ssh import RemoteCommandError


def _create_cluster(args, parser):
    if not args.config:
        print("Error: --config (-f) flag is required", file=sys.stderr)
        return 1
    try:
        with open(args.config, encoding="utf-8") as stream:
            config = parse(stream)
    except (OSError, ConfigError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if args.dry_run:
        print_yaml(config)
        return 0
    try:
        bootstrap_cluster(config)
    except (OSError, RemoteCommandError, paramiko.SSHException) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def _install(args, parser):
    parser.print_help()
    return 0


def build_parser():
    """Build the argument parser for the ``iotkube`` command."""
    parser = argparse.ArgumentParser(
        prog="iotkube",
        description=(
            "IoTKube: Opinionated Kubernetes for edge, IoT, "
            "and resilient data platforms."
        ),
    )
    commands = parser.add_subparsers(dest="command")

    create = commands.add_parser("create-cluster", help="Provision a K8s cluster")
    create.add_argument("-f", "--config", default="", help="IoTKube config file")
    create.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the object that would be sent",
    )
    create.set_defaults(handler=_create_cluster, subparser=create)

    install = commands.add_parser("install", help="Install a K8s extension")
    install.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the object that would be sent",
    )
    install.add_argument(
        "-n", "--namespace", default="", help="The namespace to install the extension to"
    )
    install.set_defaults(handler=_install, subparser=install)
    return parser


def main(argv=None):
    """Run the command line and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0
    return args.handler(args, args.subparser)


if __name__ == "__main__":
    sys.exit(main())