"""
Shared fixtures for vaultsync tests.
"""

from __future__ import annotations

import asyncio
import os
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from vaultsync.config.loader import SyncConfig
from vaultsync.exceptions import TransportError
from vaultsync.sync.types import LocalFileDescriptor, RemoteFileRecord

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


def local_file(path: str, size: int = 10, modified: datetime = BASE_TIME, content_hash: str | None = None) -> LocalFileDescriptor:
    return LocalFileDescriptor(
        relative_path=path,
        absolute_path=Path("/vault") / path,
        size_bytes=size,
        modified_at=modified,
        content_hash=content_hash,
    )


def remote_file(
    key: str,
    size: int = 10,
    modified: datetime | None = BASE_TIME,
    uploaded: datetime = BASE_TIME - timedelta(days=1),
    content_hash: str | None = None,
) -> RemoteFileRecord:
    return RemoteFileRecord(
        key=key,
        size_bytes=size,
        uploaded_at=uploaded,
        custom_modified_at=modified,
        content_hash=content_hash,
    )


def write_vault(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create ``files`` (relative path -> content) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            path.write_text(content)
        else:
            path.write_bytes(content)
    return root


def set_mtime(path: Path, when: datetime) -> None:
    ts = when.timestamp()
    os.utime(path, (ts, ts))


class FakeRemote:
    """
    In-process stand-in for RemoteStoreClient.

    Records every call; individual paths, batches and deletions can be made to fail.
    """

    def __init__(
        self,
        pages: list[dict[str, Any]] | None = None,
        *,
        fail_paths: set[str] | None = None,
        fail_batches: set[int] | None = None,
        fail_deletes: set[str] | None = None,
        fail_page: int | None = None,
    ):
        self.pages = pages or [{"files": [], "truncated": False}]
        self.fail_paths = fail_paths or set()
        self.fail_batches = fail_batches or set()
        self.fail_deletes = fail_deletes or set()
        self.fail_page = fail_page

        self.page_calls: list[tuple[str, str | None]] = []
        self.batches: list[list[dict[str, Any]]] = []
        self.deleted: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def list_page(self, prefix: str = "", cursor: str | None = None) -> dict[str, Any]:
        self.page_calls.append((prefix, cursor))
        index = len(self.page_calls) - 1
        if self.fail_page is not None and index == self.fail_page:
            raise TransportError("GET /api/list failed: 500", status=500)
        return self.pages[index]

    async def sync_batch(self, items: list[dict[str, Any]]) -> dict[str, Any]:
        self.batches.append(items)
        if len(self.batches) in self.fail_batches:
            raise TransportError("POST /api/sync failed: 502", status=502)
        results = []
        for item in items:
            if item["path"] in self.fail_paths:
                results.append({"path": item["path"], "status": "error", "error": "quota exceeded"})
            else:
                results.append({"path": item["path"], "status": "success"})
        return {"results": results}

    async def delete_file(self, key: str) -> dict[str, Any]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0.001)
            if key in self.fail_deletes:
                raise TransportError(f"DELETE /files/{key} failed: 500", status=500)
            self.deleted.append(key)
            return {"message": f"Deleted {key}"}
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def sync_config(vault: Path) -> SyncConfig:
    return SyncConfig(vault_root=vault, remote_endpoint="http://remote.test")
