"""
Batch executor: applies a reconciliation plan to the remote store.

Uploads go out in fixed-size chunks, one POST /api/sync per chunk, with the
chunk's files read and hashed concurrently. Deletions are independent and run
through a bounded worker pool. Per-item failures are recorded as outcomes and
never raised.
"""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Protocol

import aiofiles.os

from vaultsync.config.loader import SyncConfig
from vaultsync.exceptions import LocalReadError, TransportError
from vaultsync.sync.scanner import content_type_for
from vaultsync.sync.types import (
    DeletionOutcome,
    ItemOutcome,
    LocalFileDescriptor,
    UploadOutcome,
    format_timestamp,
)
from vaultsync.utils.async_utils import chunked, gather_bounded
from vaultsync.utils.hashing import content_md5, read_file_async
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.sync.executor")


class RemoteWriter(Protocol):
    """Write side of the storage facade used by the executor."""

    async def sync_batch(self, items: list[dict[str, Any]]) -> dict[str, Any]: ...

    async def delete_file(self, key: str) -> dict[str, Any]: ...


class BatchExecutor:
    """Executes uploads and deletions against a RemoteWriter."""

    def __init__(self, client: RemoteWriter, *, batch_size: int = 50, delete_concurrency: int = 8):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if delete_concurrency < 1:
            raise ValueError("delete_concurrency must be >= 1")
        self.client = client
        self.batch_size = batch_size
        self.delete_concurrency = delete_concurrency

    @classmethod
    def from_config(cls, client: RemoteWriter, config: SyncConfig) -> BatchExecutor:
        return cls(client, batch_size=config.batch_size, delete_concurrency=config.delete_concurrency)

    async def upload(self, files: Sequence[LocalFileDescriptor]) -> list[UploadOutcome]:
        """
        Upload ``files`` in chunks of ``batch_size``.

        Returns one outcome per file, in input order. A failed batch request
        marks that chunk's files as errors and moves on to the next chunk.
        """
        outcomes: list[UploadOutcome] = []
        for index, chunk in enumerate(chunked(list(files), self.batch_size), start=1):
            outcomes.extend(await self._upload_chunk(index, chunk))
        return outcomes

    async def _upload_chunk(self, index: int, chunk: list[LocalFileDescriptor]) -> list[UploadOutcome]:
        if not chunk:
            return []

        prepared = await asyncio.gather(*(self._prepare(f) for f in chunk), return_exceptions=True)

        outcomes: dict[str, UploadOutcome] = {}
        payload: list[dict[str, Any]] = []
        for descriptor, item in zip(chunk, prepared):
            key = descriptor.relative_path
            if isinstance(item, LocalReadError):
                logger.error(f"Error reading file {descriptor.absolute_path}: {item.message}")
                outcomes[key] = ItemOutcome.error(key, item.message)
            elif isinstance(item, Exception):
                logger.error(f"Error preparing {key}: {item}")
                outcomes[key] = ItemOutcome.error(key, str(item) or type(item).__name__)
            elif isinstance(item, BaseException):
                raise item
            else:
                payload.append(item)

        if payload:
            try:
                response = await self.client.sync_batch(payload)
            except TransportError as e:
                logger.error(f"Error uploading batch {index}: {e.message}")
                for item in payload:
                    outcomes[item["path"]] = ItemOutcome.error(item["path"], f"batch request failed: {e.message}")
            else:
                results = {
                    r.get("path"): r for r in (response.get("results") or []) if isinstance(r, dict)
                }
                for item in payload:
                    path = item["path"]
                    result = results.get(path)
                    if result is None:
                        outcomes[path] = ItemOutcome.error(path, "no result returned for file")
                    elif result.get("status") == "success":
                        outcomes[path] = ItemOutcome.success(path)
                    else:
                        outcomes[path] = ItemOutcome.error(path, str(result.get("error") or "upload failed"))

        successful = sum(1 for o in outcomes.values() if o.ok)
        logger.info(f"Batch {index}: Uploaded {successful}/{len(chunk)} files")
        for outcome in outcomes.values():
            if not outcome.ok:
                logger.warning(f"Upload failed for {outcome.key}: {outcome.error_detail}")

        return [outcomes[f.relative_path] for f in chunk]

    async def _prepare(self, descriptor: LocalFileDescriptor) -> dict[str, Any]:
        """
        Read, hash and encode one file for the batch request.

        The file is stat'ed again so the stored timestamp matches the bytes sent.

        Raises:
            LocalReadError: If the file disappeared or cannot be read
        """
        try:
            stat = await aiofiles.os.stat(descriptor.absolute_path)
            content = await read_file_async(descriptor.absolute_path)
        except OSError as e:
            raise LocalReadError(str(descriptor.absolute_path), e.strerror or str(e)) from e

        return {
            "path": descriptor.relative_path,
            "content": base64.b64encode(content).decode("ascii"),
            "type": content_type_for(descriptor.relative_path),
            "modified": format_timestamp(datetime.fromtimestamp(stat.st_mtime, tz=UTC)),
            "md5": content_md5(content),
        }

    async def delete(self, keys: Sequence[str]) -> list[DeletionOutcome]:
        """
        Delete ``keys`` with at most ``delete_concurrency`` requests in flight.

        Returns one outcome per key, in input order. A key that fails to delete
        stays remote and shows up as an orphan again on the next run.
        """
        keys = list(keys)
        results = await gather_bounded(self.client.delete_file, keys, max_concurrency=self.delete_concurrency)

        outcomes: list[DeletionOutcome] = []
        for key, result in zip(keys, results):
            if isinstance(result, TransportError):
                logger.error(f"Failed to delete {key}: {result.message}")
                outcomes.append(ItemOutcome.error(key, result.message))
            elif isinstance(result, Exception):
                logger.error(f"Error deleting {key}: {result}")
                outcomes.append(ItemOutcome.error(key, str(result) or type(result).__name__))
            elif isinstance(result, BaseException):
                raise result
            else:
                logger.info(f"Deleted remote file: {key}")
                outcomes.append(ItemOutcome.success(key))
        return outcomes
