"""
CLI entry point for rook-reset.

Parses options and the resource name into a RecoveryConfig, opens the etcd
store and delegates to recover_resource(). Run on (or with access to) a
control-plane node that holds the etcd client certificates.
"""

from __future__ import annotations

import sys

import click

from . import __version__
from .config import (
    DEFAULT_ETCD_CA,
    DEFAULT_ETCD_CERT,
    DEFAULT_ETCD_HOST,
    DEFAULT_ETCD_KEY,
    DEFAULT_ETCD_PORT,
    DEFAULT_ETCDCTL,
    DEFAULT_RESOURCE_TYPE,
    RecoveryConfig,
)
from .errors import RecoveryError
from .etcdctl import open_store
from .kinds import KINDS, resolve_kind
from .recover import recover_resource

# Shown at the bottom of rook-reset --help / rook-reset -h
EPILOG = """
Examples:

  rook-reset myfs                                       # Reset CephFilesystem myfs
  rook-reset --k8s-resource-type cephclusters rook-ceph # Reset CephCluster rook-ceph
  rook-reset --etcd-host 10.0.0.5 \\
      --etcd-ca /etc/kubernetes/pki/etcd/ca.crt \\
      --etcd-cert /etc/kubernetes/pki/etcd/server.crt \\
      --etcd-key /etc/kubernetes/pki/etcd/server.key \\
      --k8s-resource-type cephobjectstores my-store     # Remote etcd with kubeadm certs

Supported resource types: """ + ", ".join(KINDS) + "\n"


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.option("--etcd-ca", default=DEFAULT_ETCD_CA, show_default=True, help="CA certificate used by etcd")
@click.option("--etcd-cert", default=DEFAULT_ETCD_CERT, show_default=True, help="Client certificate for etcd")
@click.option("--etcd-key", default=DEFAULT_ETCD_KEY, show_default=True, help="Client private key for etcd")
@click.option("--etcd-host", default=DEFAULT_ETCD_HOST, show_default=True, help="The etcd domain name or IP")
@click.option("--etcd-port", default=DEFAULT_ETCD_PORT, show_default=True, type=int, help="The etcd port number")
@click.option(
    "--k8s-resource-type",
    "resource_type",
    default=DEFAULT_RESOURCE_TYPE,
    show_default=True,
    metavar="TYPE",
    help="The plural lower case name of the resource type",
)
@click.option(
    "--etcdctl",
    default=DEFAULT_ETCDCTL,
    show_default=True,
    envvar="ETCDCTL",
    help="etcdctl binary to run",
)
@click.option("-q", "--quiet", is_flag=True, help="Do not print the record before and after the reset")
@click.version_option(__version__, prog_name="rook-reset")
@click.argument("name")
def main(
    etcd_ca: str,
    etcd_cert: str,
    etcd_key: str,
    etcd_host: str,
    etcd_port: int,
    resource_type: str,
    etcdctl: str,
    quiet: bool,
    name: str,
) -> int:
    """
    Reset the Terminating Rook Ceph resource NAME back to its previous status.

    Clears metadata.deletionTimestamp and metadata.deletionGracePeriodSeconds
    by rewriting the resource directly in etcd.
    """
    if not name:
        raise click.BadParameter("must not be empty", param_hint="NAME")
    config = RecoveryConfig(
        resource_name=name,
        resource_type=resource_type,
        etcd_host=etcd_host,
        etcd_port=etcd_port,
        etcd_ca=etcd_ca,
        etcd_cert=etcd_cert,
        etcd_key=etcd_key,
        etcdctl=etcdctl,
        quiet=quiet,
    )
    try:
        resolve_kind(config.resource_type)
        with open_store(config) as store:
            recover_resource(store, config.resource_type, config.resource_name, quiet=config.quiet)
    except RecoveryError as exc:
        raise click.ClickException(str(exc)) from exc
    return 0


if __name__ == "__main__":
    sys.exit(main())
