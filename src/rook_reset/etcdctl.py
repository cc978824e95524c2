"""
Etcdctl invocation and the etcd store handle.

All etcd access goes through subprocess etcdctl (v3 API) calls, the same way
the Kubernetes tooling shells out to kubectl. This module loads and checks
the TLS material, wraps etcdctl, and exposes a small get/put store bounded by
a single operation deadline.
"""

from __future__ import annotations

import base64
import binascii
import json
import os
import ssl
import subprocess
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from .config import DIAL_TIMEOUT, OPERATION_TIMEOUT, RecoveryConfig
from .errors import ConfigLoadError, StoreTimeoutError, StoreUnavailableError


@dataclass(frozen=True)
class TLSCredentials:
    """Paths to the mutual-TLS material, checked to be loadable."""

    ca: str
    cert: str
    key: str


def load_credentials(ca: str, cert: str, key: str) -> TLSCredentials:
    """
    Load the CA and the client key pair before any network activity.

    Args:
        ca: Path to the CA certificate used to verify etcd.
        cert: Path to the client certificate.
        key: Path to the client private key.

    Returns:
        TLSCredentials pointing at the verified files.

    Raises:
        ConfigLoadError: A file is missing, unreadable or not valid PEM.
    """
    try:
        context = ssl.create_default_context(cafile=ca)
    except (OSError, ssl.SSLError) as exc:
        raise ConfigLoadError(f"cannot load CA certificate {ca}: {exc}") from exc
    try:
        context.load_cert_chain(certfile=cert, keyfile=key)
    except (OSError, ssl.SSLError) as exc:
        raise ConfigLoadError(f"cannot load client key pair {cert}, {key}: {exc}") from exc
    return TLSCredentials(ca=ca, cert=cert, key=key)


def run_etcdctl(
    args: list[str],
    etcdctl: str,
    endpoint: str,
    credentials: TLSCredentials,
    timeout: float,
    stdin: Optional[bytes] = None,
) -> subprocess.CompletedProcess:
    """
    Run etcdctl against one endpoint with the given args.

    Args:
        args: etcdctl subcommand and arguments (e.g. ["get", "/registry/x", "-w", "json"]).
        etcdctl: Path or name of the etcdctl binary.
        endpoint: Endpoint URL, e.g. "https://localhost:2379".
        credentials: TLS material passed to etcdctl.
        timeout: Seconds allowed for the command, also passed as --command-timeout.
        stdin: Optional bytes fed to the process on stdin.

    Returns:
        CompletedProcess with bytes stdout/stderr.

    Raises:
        StoreTimeoutError: The process did not finish within timeout.
        StoreUnavailableError: The etcdctl binary could not be started.
    """
    cmd = [
        etcdctl,
        f"--endpoints={endpoint}",
        f"--cacert={credentials.ca}",
        f"--cert={credentials.cert}",
        f"--key={credentials.key}",
        f"--dial-timeout={DIAL_TIMEOUT}s",
        f"--command-timeout={timeout:.3f}s",
    ] + args
    env = dict(os.environ, ETCDCTL_API="3")
    try:
        return subprocess.run(
            cmd,
            input=stdin,
            capture_output=True,
            timeout=timeout,
            env=env,
        )
    except subprocess.TimeoutExpired as exc:
        raise StoreTimeoutError(f"etcdctl {args[0]} timed out after {timeout:.1f}s") from exc
    except OSError as exc:
        raise StoreUnavailableError(f"cannot run {etcdctl}: {exc}") from exc


def _check(result: subprocess.CompletedProcess, action: str) -> None:
    """Map a failed etcdctl run to the matching store error."""
    if result.returncode == 0:
        return
    stderr = (result.stderr or b"").decode("utf-8", errors="replace").strip()
    if "deadline exceeded" in stderr:
        raise StoreTimeoutError(f"etcd {action} timed out: {stderr}")
    raise StoreUnavailableError(f"etcd {action} failed: {stderr or f'exit code {result.returncode}'}")


class EtcdStore:
    """
    Point get/put access to one etcd endpoint.

    The deadline is fixed when the store is created; every call only gets
    the time that is left of it.
    """

    def __init__(
        self,
        endpoint: str,
        credentials: TLSCredentials,
        etcdctl: str = "etcdctl",
        timeout: float = OPERATION_TIMEOUT,
    ) -> None:
        self.endpoint = endpoint
        self.credentials = credentials
        self.etcdctl = etcdctl
        self._deadline = time.monotonic() + timeout
        self._closed = False

    def _remaining(self) -> float:
        if self._closed:
            raise StoreUnavailableError("etcd store handle is closed")
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise StoreTimeoutError("etcd operation deadline exceeded")
        return remaining

    def _run(self, args: list[str], stdin: Optional[bytes] = None) -> subprocess.CompletedProcess:
        return run_etcdctl(
            args,
            self.etcdctl,
            self.endpoint,
            self.credentials,
            self._remaining(),
            stdin=stdin,
        )

    def get(self, key: str) -> Optional[bytes]:
        """Return the value stored at key, or None when the key does not exist."""
        result = self._run(["get", key, "-w", "json"])
        _check(result, "get")
        try:
            resp = json.loads(result.stdout)
            kvs = resp.get("kvs") or []
            if not kvs:
                return None
            return base64.b64decode(kvs[0].get("value", ""))
        except (json.JSONDecodeError, AttributeError, binascii.Error) as exc:
            raise StoreUnavailableError(f"unexpected etcdctl get output: {exc}") from exc

    def put(self, key: str, value: bytes) -> None:
        """Overwrite key with value. etcdctl reads the value from stdin."""
        result = self._run(["put", key], stdin=value)
        _check(result, "put")

    def close(self) -> None:
        self._closed = True


@contextmanager
def open_store(config: RecoveryConfig) -> Iterator[EtcdStore]:
    """
    Load credentials and yield an EtcdStore that is closed on every exit path.

    Raises:
        ConfigLoadError: From load_credentials, before the store exists.
    """
    credentials = load_credentials(config.etcd_ca, config.etcd_cert, config.etcd_key)
    store = EtcdStore(config.endpoint, credentials, etcdctl=config.etcdctl)
    try:
        yield store
    finally:
        store.close()
