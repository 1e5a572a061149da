"""
vaultsync - one-way reconciliation of a local notes vault into a remote object store.
"""

__version__ = "0.1.0"

from vaultsync.config import SyncConfig, load_config
from vaultsync.exceptions import (
    ConfigurationError,
    InvalidKeyError,
    LocalReadError,
    LocalScanError,
    SnapshotFetchError,
    StorageError,
    TransportError,
    VaultSyncError,
)
from vaultsync.remote import RemoteStoreClient
from vaultsync.sync import (
    BatchExecutor,
    HashChangeDetector,
    MetadataChangeDetector,
    ReconciliationPlan,
    SyncReport,
    delete_prefix,
    fetch_remote_snapshot,
    plan_reconciliation,
    run_sync,
)

__all__ = [
    "BatchExecutor",
    "ConfigurationError",
    "HashChangeDetector",
    "InvalidKeyError",
    "LocalReadError",
    "LocalScanError",
    "MetadataChangeDetector",
    "ReconciliationPlan",
    "RemoteStoreClient",
    "SnapshotFetchError",
    "StorageError",
    "SyncConfig",
    "SyncReport",
    "TransportError",
    "VaultSyncError",
    "__version__",
    "delete_prefix",
    "fetch_remote_snapshot",
    "load_config",
    "plan_reconciliation",
    "run_sync",
]
