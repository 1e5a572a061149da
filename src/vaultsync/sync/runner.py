"""
Sync run orchestration.

scan local -> fetch complete remote snapshot -> plan -> upload -> delete -> report.

A run is not transactional. If it stops halfway the remote store is left
partially updated, and the next run's diff repairs the gap.
"""

from __future__ import annotations

import asyncio
from typing import Any

from vaultsync.config.loader import SyncConfig
from vaultsync.exceptions import ConfigurationError
from vaultsync.remote.client import RemoteStoreClient
from vaultsync.sync.executor import BatchExecutor
from vaultsync.sync.planner import get_change_detector, plan_reconciliation
from vaultsync.sync.scanner import scan_from_config
from vaultsync.sync.snapshot import fetch_remote_snapshot
from vaultsync.sync.types import ChangeDetector, ItemOutcome, SyncReport
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.sync.runner")


def build_client(config: SyncConfig) -> RemoteStoreClient:
    """Create a RemoteStoreClient from the configured endpoint and limits."""
    if not config.remote_endpoint:
        raise ConfigurationError("remote_endpoint is not configured")
    return RemoteStoreClient(
        config.remote_endpoint,
        max_concurrent=max(config.delete_concurrency, 1),
        max_retries=config.max_retries,
        timeout=config.request_timeout,
    )


async def run_sync(
    config: SyncConfig,
    *,
    client: Any = None,
    detector: ChangeDetector | None = None,
    dry_run: bool = False,
) -> SyncReport:
    """
    Run one reconciliation of the local vault against the remote store.

    Args:
        config: Sync configuration (vault root and endpoint must be set)
        client: Remote client; defaults to a RemoteStoreClient built from config
        detector: Change detection strategy; defaults to config.change_detection
        dry_run: Stop after planning

    Returns:
        SyncReport with per-item outcomes

    Raises:
        LocalScanError: If part of the vault cannot be scanned
        SnapshotFetchError: If the remote listing cannot be fetched completely
    """
    if client is None:
        async with build_client(config) as owned_client:
            return await run_sync(config, client=owned_client, detector=detector, dry_run=dry_run)

    detector = detector or get_change_detector(config.change_detection)

    logger.info(f"Syncing vault from: {config.vault_root}")
    logger.info(f"Remote endpoint: {config.remote_endpoint}")

    # The filesystem walk is blocking; keep it off the event loop
    scan = await asyncio.to_thread(scan_from_config, config)
    logger.info(f"Found {len(scan.files)} local files")

    remote = await fetch_remote_snapshot(client)
    logger.info(f"Found {len(remote)} remote files")

    plan = plan_reconciliation(scan.files, remote, detector)
    logger.info(f"Files to upload: {len(plan.uploads)}")
    logger.info(f"Files to delete: {len(plan.deletions)}")

    report = SyncReport(
        scanned=len(scan.files),
        remote_count=len(remote),
        plan=plan,
        oversized=list(scan.oversized),
        dry_run=dry_run,
    )
    if dry_run:
        return report

    executor = BatchExecutor.from_config(client, config)
    if plan.uploads:
        logger.info("Uploading files...")
        report.uploads = await executor.upload(plan.uploads)
    if plan.deletions:
        logger.info("Deleting orphaned remote files...")
        report.deletions = await executor.delete(plan.deletions)

    logger.info(
        f"Sync complete: uploaded {report.uploaded}, deleted {report.deleted}, "
        f"failed {len(report.upload_failures)} upload(s) and {len(report.deletion_failures)} deletion(s)"
    )
    if not report.ok:
        for line in report.summary_lines():
            logger.warning(line)
    return report


async def delete_prefix(client: Any, prefix: str, *, max_concurrency: int = 8) -> list[ItemOutcome]:
    """
    Delete every remote key under ``prefix``.

    The listing is fully paginated before any deletion starts.

    Raises:
        SnapshotFetchError: If the listing cannot be fetched completely
    """
    snapshot = await fetch_remote_snapshot(client, prefix=prefix)
    logger.info(f"Found {len(snapshot)} files under '{prefix}' to delete")
    executor = BatchExecutor(client, delete_concurrency=max_concurrency)
    return await executor.delete(list(snapshot))
