"""
Errors raised while recovering a resource.

Every failure is terminal; nothing here is retried. The CLI turns any
RecoveryError into a one-line message on stderr and exit code 1.
"""

from __future__ import annotations


class RecoveryError(Exception):
    """Base class for all rook-reset failures."""


class ConfigLoadError(RecoveryError):
    """CA, client certificate or client key could not be loaded."""


class StoreUnavailableError(RecoveryError):
    """etcd could not be reached or rejected the request."""


class StoreTimeoutError(RecoveryError, TimeoutError):
    """The operation did not finish before its deadline."""


class NotFoundError(RecoveryError):
    """No value is stored at the computed key."""

    def __init__(self, name: str, key: str) -> None:
        self.name = name
        self.key = key
        super().__init__(
            f"cannot find resource [{name}] in etcd with key [{key}]\n"
            "please check the resource type and the resource name are set correctly"
        )


class DecodeError(RecoveryError):
    """Stored value is not a JSON record of the expected kind."""


class UnsupportedKindError(RecoveryError):
    """Resource type is not one of the supported Ceph kinds."""

    def __init__(self, resource_type: str, supported: list[str]) -> None:
        self.resource_type = resource_type
        super().__init__(
            f"Ceph type not supported: {resource_type!r} "
            f"(expected one of: {', '.join(supported)})"
        )


class NotTerminatingError(RecoveryError):
    """Resource exists but has no deletion timestamp set."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"resource [{name}] is not in terminating status")
