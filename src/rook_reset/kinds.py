"""
Supported Ceph resource kinds and their record codecs.

Each ResourceKind pairs the plural resource type used in the etcd key with
the Kubernetes kind it decodes to. Records are kept as plain dicts so every
field the tool does not touch survives the decode/encode round trip.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass

from .config import API_GROUP, PROTOBUF_PREFIX
from .errors import DecodeError, UnsupportedKindError

_RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def _parse_finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def _reject_constant(name: str) -> None:
    raise ValueError(f"{name} is not valid JSON")


@dataclass(frozen=True)
class ResourceKind:
    """One supported custom resource type."""

    plural: str
    kind: str
    group: str = API_GROUP

    def decode(self, raw: bytes) -> dict:
        """
        Decode a stored etcd value into a resource dict.

        Args:
            raw: Value bytes exactly as read from etcd.

        Returns:
            The decoded object.

        Raises:
            DecodeError: The value is protobuf-encoded, not JSON, or does not
                look like a resource of this kind.
        """
        if raw.startswith(PROTOBUF_PREFIX):
            raise DecodeError(
                f"{self.kind} record is protobuf-encoded; only JSON records are supported"
            )
        try:
            obj = json.loads(
                raw.decode("utf-8"),
                parse_float=_parse_finite_float,
                parse_constant=_reject_constant,
            )
        except ValueError as exc:
            raise DecodeError(f"{self.kind} record is not valid JSON: {exc}") from exc
        self._validate(obj)
        return obj

    def encode(self, obj: dict) -> bytes:
        """
        Encode a resource dict as compact JSON, preserving key order.

        Raises:
            DecodeError: The object holds something JSON cannot represent
                (non-finite numbers, lone surrogates).
        """
        try:
            return json.dumps(
                obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False
            ).encode("utf-8")
        except ValueError as exc:
            raise DecodeError(f"{self.kind} record cannot be re-encoded as JSON: {exc}") from exc

    def _validate(self, obj: object) -> None:
        if not isinstance(obj, dict):
            raise DecodeError(f"{self.kind} record must be a JSON object")
        kind = obj.get("kind")
        if kind is not None and kind != self.kind:
            raise DecodeError(f"expected kind {self.kind}, found {kind}")
        api_version = obj.get("apiVersion")
        if api_version is not None:
            if not isinstance(api_version, str) or api_version.split("/", 1)[0] != self.group:
                raise DecodeError(f"expected apiVersion in group {self.group}, found {api_version}")
        spec = obj.get("spec")
        if spec is not None and not isinstance(spec, dict):
            raise DecodeError(f"{self.kind} spec must be an object")
        meta = obj.get("metadata")
        # No metadata means no deletion timestamp: not terminating.
        if meta is None:
            return
        if not isinstance(meta, dict):
            raise DecodeError(f"{self.kind} metadata must be an object")
        ts = meta.get("deletionTimestamp")
        if ts is not None and not (isinstance(ts, str) and _RFC3339.match(ts)):
            raise DecodeError(f"metadata.deletionTimestamp is not an RFC3339 timestamp: {ts!r}")
        grace = meta.get("deletionGracePeriodSeconds")
        if grace is not None and (isinstance(grace, bool) or not isinstance(grace, int)):
            raise DecodeError(f"metadata.deletionGracePeriodSeconds is not an integer: {grace!r}")


CEPH_FILESYSTEM = ResourceKind("cephfilesystems", "CephFilesystem")
CEPH_OBJECT_STORE = ResourceKind("cephobjectstores", "CephObjectStore")
CEPH_CLUSTER = ResourceKind("cephclusters", "CephCluster")

# Plural resource type (as used in the etcd key) -> kind.
KINDS = {k.plural: k for k in (CEPH_FILESYSTEM, CEPH_OBJECT_STORE, CEPH_CLUSTER)}


def resolve_kind(resource_type: str) -> ResourceKind:
    """Look up a supported kind by its exact plural name."""
    try:
        return KINDS[resource_type]
    except KeyError:
        raise UnsupportedKindError(resource_type, list(KINDS)) from None
