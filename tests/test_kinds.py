"""Tests for resource kinds and record decoding."""

import json

import pytest

from rook_reset.errors import DecodeError, UnsupportedKindError
from rook_reset.kinds import CEPH_CLUSTER, CEPH_FILESYSTEM, CEPH_OBJECT_STORE, KINDS, resolve_kind


def test_supported_kinds():
    """Exactly the three Ceph kinds are supported."""
    assert set(KINDS) == {"cephfilesystems", "cephobjectstores", "cephclusters"}
    assert KINDS["cephclusters"].kind == "CephCluster"


def test_resolve_kind_exact_match():
    """Lookup is exact and case-sensitive."""
    assert resolve_kind("cephobjectstores") is CEPH_OBJECT_STORE
    with pytest.raises(UnsupportedKindError):
        resolve_kind("CephObjectStores")


def test_resolve_kind_unsupported():
    """Unknown types carry the rejected value."""
    with pytest.raises(UnsupportedKindError) as excinfo:
        resolve_kind("widgets")
    assert excinfo.value.resource_type == "widgets"
    assert "widgets" in str(excinfo.value)


@pytest.mark.parametrize("kind", [CEPH_FILESYSTEM, CEPH_OBJECT_STORE, CEPH_CLUSTER])
@pytest.mark.parametrize(
    "metadata",
    [
        {"name": "x"},
        {"name": "x", "deletionTimestamp": "2024-01-01T00:00:00Z", "deletionGracePeriodSeconds": 30},
    ],
)
def test_decode_encode_round_trip(kind, metadata):
    """decode(encode(obj)) == obj for each kind, with and without deletion markers."""
    obj = {
        "apiVersion": "ceph.rook.io/v1",
        "kind": kind.kind,
        "metadata": metadata,
        "spec": {"dataPools": [{"replicated": {"size": 3}}], "preserveFilesystemOnDelete": True},
    }
    assert kind.decode(kind.encode(obj)) == obj


def test_encode_is_compact_and_ordered():
    """Encoding keeps key order and drops whitespace."""
    obj = {"metadata": {"name": "fs1"}, "spec": {"b": 1, "a": "é"}}
    assert CEPH_FILESYSTEM.encode(obj) == '{"metadata":{"name":"fs1"},"spec":{"b":1,"a":"é"}}'.encode()


def test_decode_rejects_protobuf():
    """Protobuf-encoded values are reported, not parsed."""
    with pytest.raises(DecodeError, match="protobuf"):
        CEPH_CLUSTER.decode(b"k8s\x00\n\x0c\n\x02v1")


@pytest.mark.parametrize(
    "raw",
    [
        b"not json",
        b"\xff\xfe",
        b"[1, 2]",
        b'{"metadata": "x"}',
    ],
)
def test_decode_rejects_malformed(raw):
    """Invalid JSON or a non-object record or metadata fails to decode."""
    with pytest.raises(DecodeError):
        CEPH_FILESYSTEM.decode(raw)


def test_decode_rejects_wrong_kind():
    """A CephCluster record cannot be decoded as a CephFilesystem."""
    raw = json.dumps({"kind": "CephCluster", "metadata": {"name": "x"}}).encode()
    with pytest.raises(DecodeError, match="CephFilesystem"):
        CEPH_FILESYSTEM.decode(raw)


def test_decode_rejects_wrong_group():
    """apiVersion must be in the ceph.rook.io group."""
    raw = json.dumps({"apiVersion": "v1", "metadata": {"name": "x"}}).encode()
    with pytest.raises(DecodeError):
        CEPH_CLUSTER.decode(raw)


@pytest.mark.parametrize(
    "metadata",
    [
        {"deletionTimestamp": "yesterday"},
        {"deletionTimestamp": 1700000000},
        {"deletionTimestamp": "2024-01-01T00:00:00Z", "deletionGracePeriodSeconds": "30"},
        {"deletionTimestamp": "2024-01-01T00:00:00Z", "deletionGracePeriodSeconds": True},
    ],
)
def test_decode_rejects_bad_deletion_fields(metadata):
    """Deletion markers must have their Kubernetes types."""
    raw = json.dumps({"metadata": metadata}).encode()
    with pytest.raises(DecodeError):
        CEPH_OBJECT_STORE.decode(raw)


def test_decode_accepts_fractional_offset_timestamp():
    """RFC3339 with fractional seconds and numeric offset is accepted."""
    raw = json.dumps({"metadata": {"deletionTimestamp": "2024-06-01T10:20:30.123+02:00"}}).encode()
    assert CEPH_OBJECT_STORE.decode(raw)["metadata"]["deletionTimestamp"].endswith("+02:00")


@pytest.mark.parametrize(
    "raw",
    [
        b'{"metadata": {"name": "x"}, "spec": {"size": 1e400}}',
        b'{"metadata": {"name": "x"}, "spec": {"size": -1e400}}',
        b'{"metadata": {"name": "x"}, "spec": {"size": NaN}}',
        b'{"metadata": {"name": "x"}, "spec": {"size": Infinity}}',
    ],
)
def test_decode_rejects_non_finite_numbers(raw):
    """Numbers JSON cannot carry back are refused on decode."""
    with pytest.raises(DecodeError):
        CEPH_CLUSTER.decode(raw)


def test_encode_rejects_non_finite_numbers():
    with pytest.raises(DecodeError):
        CEPH_CLUSTER.encode({"metadata": {}, "spec": {"size": float("inf")}})


def test_encode_rejects_lone_surrogate():
    """A lone surrogate decodes but cannot be written back as UTF-8."""
    obj = CEPH_CLUSTER.decode(b'{"metadata": {"annotations": {"a": "\\ud800"}}}')
    with pytest.raises(DecodeError):
        CEPH_CLUSTER.encode(obj)


@pytest.mark.parametrize("raw", [b'{"spec": {}}', b'{"metadata": null}'])
def test_decode_without_metadata(raw):
    """Missing or null metadata decodes; the record simply has no deletion marker."""
    assert isinstance(CEPH_FILESYSTEM.decode(raw), dict)
