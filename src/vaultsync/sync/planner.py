"""
Reconciliation planner.

Pure function from a local snapshot and a complete remote snapshot to the
uploads and deletions that make the remote store match the local tree.
No I/O happens here.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from vaultsync.sync.types import (
    ChangeDetector,
    LocalFileDescriptor,
    ReconciliationPlan,
    RemoteFileRecord,
    truncate_to_millis,
)


class MetadataChangeDetector:
    """
    Size + modification time heuristic.

    A file is re-uploaded when its size differs or the local mtime is strictly
    newer than the remote's effective timestamp. Local mtimes are compared at
    millisecond precision because that is what the remote metadata stores.

    Known limitation: content changes that keep size and timestamp identical
    go unnoticed, and clock skew can cause needless re-uploads.
    """

    def has_changed(self, local: LocalFileDescriptor, remote: RemoteFileRecord) -> bool:
        if local.size_bytes != remote.size_bytes:
            return True
        return truncate_to_millis(local.modified_at) > remote.effective_modified_at


class HashChangeDetector:
    """
    Content hash comparison, falling back to metadata when a hash is missing.

    Needs the scanner to populate ``content_hash`` on local descriptors.
    """

    def __init__(self, fallback: ChangeDetector | None = None):
        self.fallback = fallback or MetadataChangeDetector()

    def has_changed(self, local: LocalFileDescriptor, remote: RemoteFileRecord) -> bool:
        if local.size_bytes != remote.size_bytes:
            return True
        if local.content_hash and remote.content_hash:
            return local.content_hash.lower() != remote.content_hash.lower()
        return self.fallback.has_changed(local, remote)


def get_change_detector(mode: str) -> ChangeDetector:
    """Return the detector for a ``change_detection`` config value."""
    if mode == "hash":
        return HashChangeDetector()
    if mode == "metadata":
        return MetadataChangeDetector()
    raise ValueError(f"Unknown change detection mode: {mode}")


def plan_reconciliation(
    local: Iterable[LocalFileDescriptor],
    remote: Mapping[str, RemoteFileRecord],
    detector: ChangeDetector | None = None,
) -> ReconciliationPlan:
    """
    Compute the uploads and deletions for one run.

    Args:
        local: Local snapshot. Duplicate relative paths keep their first occurrence.
        remote: Complete remote snapshot keyed by object key.
        detector: Change detection strategy (default: MetadataChangeDetector)

    Returns:
        ReconciliationPlan ordered by input iteration order. Upload and
        deletion keys never overlap.
    """
    detector = detector or MetadataChangeDetector()

    local_keys: set[str] = set()
    uploads: list[LocalFileDescriptor] = []
    for descriptor in local:
        key = descriptor.relative_path
        if key in local_keys:
            continue
        local_keys.add(key)

        record = remote.get(key)
        if record is None or detector.has_changed(descriptor, record):
            uploads.append(descriptor)

    deletions = [key for key in remote if key not in local_keys]

    return ReconciliationPlan(uploads=tuple(uploads), deletions=tuple(deletions))
