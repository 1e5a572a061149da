"""
Reconciliation engine: scanning, snapshot assembly, planning and execution.
"""

from vaultsync.sync.executor import BatchExecutor
from vaultsync.sync.planner import HashChangeDetector, MetadataChangeDetector, plan_reconciliation
from vaultsync.sync.runner import delete_prefix, run_sync
from vaultsync.sync.snapshot import fetch_remote_snapshot
from vaultsync.sync.types import (
    ItemOutcome,
    LocalFileDescriptor,
    OutcomeStatus,
    ReconciliationPlan,
    RemoteFileRecord,
    SyncReport,
)

__all__ = [
    "BatchExecutor",
    "HashChangeDetector",
    "ItemOutcome",
    "LocalFileDescriptor",
    "MetadataChangeDetector",
    "OutcomeStatus",
    "ReconciliationPlan",
    "RemoteFileRecord",
    "SyncReport",
    "delete_prefix",
    "fetch_remote_snapshot",
    "plan_reconciliation",
    "run_sync",
]
