"""
Local filesystem object store.

Objects live as plain files under ``root``; their metadata (content type,
custom metadata, upload time, etag) is kept in JSON sidecars under
``root/.vaultsync-meta/``.
"""

from __future__ import annotations

import asyncio
import json
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from vaultsync.exceptions import InvalidKeyError, StorageError
from vaultsync.storage.base import (
    DEFAULT_LIST_LIMIT,
    ListPage,
    ObjectStore,
    StoredObject,
    make_etag,
    paginate_keys,
    validate_key,
)
from vaultsync.sync.types import parse_timestamp

META_DIR = ".vaultsync-meta"
TMP_SUFFIX = ".vaultsync-part"


class FilesystemObjectStore(ObjectStore):
    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def meta_root(self) -> Path:
        return self.root / META_DIR

    def _object_path(self, key: str) -> Path:
        """
        Resolve ``key`` to a path under root.

        Raises:
            InvalidKeyError: If the key is invalid, reserved or escapes the root
        """
        validate_key(key)
        if key == META_DIR or key.startswith(f"{META_DIR}/"):
            raise InvalidKeyError(key, "reserved object key")
        root_resolved = self.root.resolve()
        full = (self.root / key).resolve()
        try:
            full.relative_to(root_resolved)
        except ValueError as e:
            raise InvalidKeyError(key, "path traversal detected") from e
        return self.root / key

    def _meta_path(self, key: str) -> Path:
        return self.meta_root / f"{key}.json"

    def _all_keys(self) -> list[str]:
        keys = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            if Path(dirpath) == self.root:
                dirnames[:] = [d for d in dirnames if d != META_DIR]
            for name in filenames:
                if name.endswith(TMP_SUFFIX):
                    continue
                keys.append((Path(dirpath) / name).relative_to(self.root).as_posix())
        return keys

    async def _read_meta(self, key: str, object_path: Path) -> StoredObject:
        meta: dict[str, Any] = {}
        meta_path = self._meta_path(key)
        try:
            async with aiofiles.open(meta_path) as f:
                meta = json.loads(await f.read())
        except FileNotFoundError:
            pass
        except (OSError, ValueError) as e:
            raise StorageError(f"Corrupt metadata for {key}: {e}", details={"key": key}) from e

        stat = await aiofiles.os.stat(object_path)
        uploaded = parse_timestamp(meta.get("uploaded")) or datetime.fromtimestamp(stat.st_mtime, tz=UTC)
        return StoredObject(
            key=key,
            size=stat.st_size,
            uploaded=uploaded,
            etag=meta.get("etag") or "",
            content_type=meta.get("content_type") or "application/octet-stream",
            custom_metadata=dict(meta.get("custom_metadata") or {}),
        )

    async def list(self, prefix: str = "", cursor: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> ListPage:
        all_keys = await asyncio.to_thread(self._all_keys)
        keys, truncated, next_cursor = paginate_keys(all_keys, prefix, cursor, limit)
        objects = [await self._read_meta(k, self.root / k) for k in keys]
        return ListPage(objects=objects, truncated=truncated, cursor=next_cursor)

    async def get(self, key: str) -> StoredObject | None:
        path = self._object_path(key)
        if not path.is_file():
            return None
        obj = await self._read_meta(key, path)
        async with aiofiles.open(path, "rb") as f:
            obj.body = await f.read()
        if not obj.etag:
            obj.etag = make_etag(obj.body)
        return obj

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
        custom_metadata: dict[str, str] | None = None,
    ) -> StoredObject:
        path = self._object_path(key)
        meta_path = self._meta_path(key)
        obj = StoredObject(
            key=key,
            size=len(data),
            uploaded=datetime.now(UTC),
            etag=make_etag(data),
            content_type=content_type or "application/octet-stream",
            custom_metadata=dict(custom_metadata or {}),
        )

        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            await aiofiles.os.makedirs(meta_path.parent, exist_ok=True)
            # Write to a temp file and rename so readers never see partial content
            tmp_path = path.with_name(path.name + TMP_SUFFIX)
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, path)
            async with aiofiles.open(meta_path, "w") as f:
                await f.write(
                    json.dumps(
                        {
                            "uploaded": obj.uploaded.isoformat(),
                            "etag": obj.etag,
                            "content_type": obj.content_type,
                            "custom_metadata": obj.custom_metadata,
                        }
                    )
                )
        except OSError as e:
            raise StorageError(f"Failed to store {key}: {e}", details={"key": key}) from e
        return obj

    async def delete(self, key: str) -> None:
        path = self._object_path(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}", details={"key": key}) from e
        try:
            await aiofiles.os.remove(self._meta_path(key))
        except FileNotFoundError:
            pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(root='{self.root}')"
