"""
Constants and run configuration for rook-reset.

Defines ANSI codes for output formatting, the fixed pieces of the etcd key
layout used by the Kubernetes API server, connection defaults, and the
immutable RecoveryConfig built once from the command line.
"""

from __future__ import annotations

from dataclasses import dataclass

# ANSI escape sequences for terminal output
BOLD = "\033[1m"   # Start bold
SGR0 = "\033[0m"   # Reset (end bold)

# Key layout: /<KEY_PREFIX>/<API_GROUP>/<plural type>/<name>
KEY_PREFIX = "registry"
API_GROUP = "ceph.rook.io"

DEFAULT_RESOURCE_TYPE = "cephfilesystems"

DEFAULT_ETCD_HOST = "localhost"
DEFAULT_ETCD_PORT = 2379
DEFAULT_ETCD_CA = "ca.crt"
DEFAULT_ETCD_CERT = "etcd.crt"
DEFAULT_ETCD_KEY = "etcd.key"
DEFAULT_ETCDCTL = "etcdctl"

# Seconds.
DIAL_TIMEOUT = 2
OPERATION_TIMEOUT = 5

# Envelope the API server puts in front of protobuf-encoded values.
PROTOBUF_PREFIX = b"k8s\x00"


@dataclass(frozen=True)
class RecoveryConfig:
    """Everything one run needs, collected from the CLI options."""

    resource_name: str
    resource_type: str = DEFAULT_RESOURCE_TYPE
    etcd_host: str = DEFAULT_ETCD_HOST
    etcd_port: int = DEFAULT_ETCD_PORT
    etcd_ca: str = DEFAULT_ETCD_CA
    etcd_cert: str = DEFAULT_ETCD_CERT
    etcd_key: str = DEFAULT_ETCD_KEY
    etcdctl: str = DEFAULT_ETCDCTL
    quiet: bool = False

    @property
    def endpoint(self) -> str:
        return f"https://{self.etcd_host}:{self.etcd_port}"
