"""
In-memory object store, for tests and throwaway facades.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

from vaultsync.storage.base import (
    DEFAULT_LIST_LIMIT,
    ListPage,
    ObjectStore,
    StoredObject,
    make_etag,
    paginate_keys,
    validate_key,
)


class MemoryObjectStore(ObjectStore):
    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}

    def __len__(self) -> int:
        return len(self._objects)

    def keys(self) -> list[str]:
        return sorted(self._objects)

    async def list(self, prefix: str = "", cursor: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> ListPage:
        keys, truncated, next_cursor = paginate_keys(self._objects, prefix, cursor, limit)
        objects = [replace(self._objects[k], body=None) for k in keys]
        return ListPage(objects=objects, truncated=truncated, cursor=next_cursor)

    async def get(self, key: str) -> StoredObject | None:
        obj = self._objects.get(key)
        return replace(obj) if obj is not None else None

    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
        custom_metadata: dict[str, str] | None = None,
    ) -> StoredObject:
        validate_key(key)
        obj = StoredObject(
            key=key,
            size=len(data),
            uploaded=datetime.now(UTC),
            etag=make_etag(data),
            content_type=content_type or "application/octet-stream",
            custom_metadata=dict(custom_metadata or {}),
            body=bytes(data),
        )
        self._objects[key] = obj
        return replace(obj, body=None)

    async def delete(self, key: str) -> None:
        self._objects.pop(key, None)
