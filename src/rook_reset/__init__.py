"""
rook_reset: Reset Rook Ceph resources stuck in Terminating state.

Rewrites a CephFilesystem, CephObjectStore or CephCluster record directly in
etcd, clearing metadata.deletionTimestamp so the resource is no longer
being deleted.
"""

__version__ = "0.1.0"
