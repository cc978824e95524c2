"""
Recovery logic: reset a Ceph resource stuck in Terminating.

Builds the etcd key for the resource, reads and decodes the stored record,
clears its deletion markers and writes it back to the same key. The write is
a plain overwrite; nothing guards against another writer between the get and
the put.
"""

from __future__ import annotations

from .config import API_GROUP, BOLD, KEY_PREFIX, SGR0
from .errors import NotFoundError, NotTerminatingError
from .kinds import resolve_kind

DELETION_FIELDS = ("deletionTimestamp", "deletionGracePeriodSeconds")


def build_key(
    resource_type: str,
    resource_name: str,
    prefix: str = KEY_PREFIX,
    group: str = API_GROUP,
) -> str:
    """Return the etcd key, e.g. /registry/ceph.rook.io/cephclusters/my-cluster."""
    return f"/{prefix}/{group}/{resource_type}/{resource_name}"


def is_terminating(obj: dict) -> bool:
    return (obj.get("metadata") or {}).get("deletionTimestamp") is not None


def clear_deletion_markers(obj: dict) -> dict:
    """Drop deletionTimestamp and deletionGracePeriodSeconds together, in place."""
    meta = obj["metadata"]
    for field in DELETION_FIELDS:
        meta.pop(field, None)
    return obj


def recover_resource(store, resource_type: str, resource_name: str, quiet: bool = False) -> bytes:
    """
    Reset one terminating resource back to its pre-deletion state.

    Args:
        store: Object with get(key) -> Optional[bytes] and put(key, value),
            e.g. an EtcdStore.
        resource_type: Plural resource type, one of the supported kinds
            (e.g. "cephfilesystems").
        resource_name: Name of the stuck resource.
        quiet: If True, do not print the before/after payloads.

    Returns:
        The bytes written back to the store.

    Raises:
        UnsupportedKindError: resource_type is not supported; the store is not touched.
        NotFoundError: Nothing is stored at the computed key.
        DecodeError: The stored value is not a record of the expected kind.
        NotTerminatingError: The resource has no deletion timestamp; nothing is written.
        StoreUnavailableError, StoreTimeoutError: From the store.
    """
    kind = resolve_kind(resource_type)
    if not resource_name:
        raise ValueError("resource name must not be empty")
    key = build_key(kind.plural, resource_name)
    print(f"{BOLD}Searching for key{SGR0} {key}")

    raw = store.get(key)
    if raw is None:
        raise NotFoundError(resource_name, key)
    if not quiet:
        print(f"{BOLD}Previous:{SGR0} {raw.decode('utf-8', errors='replace')}")

    obj = kind.decode(raw)
    if not is_terminating(obj):
        raise NotTerminatingError(resource_name)

    new_data = kind.encode(clear_deletion_markers(obj))
    if not quiet:
        print(f"{BOLD}After:{SGR0} {new_data.decode('utf-8')}")

    store.put(key, new_data)
    print(f"{kind.kind} {resource_name} reset from Terminating.")
    return new_data
