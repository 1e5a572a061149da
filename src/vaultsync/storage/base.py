"""
Object store base class.

The storage facade serves any backend implementing list/get/put/delete.
Keys are case-sensitive strings; listings are returned in sorted key order and
the page cursor is the last key of the page.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from vaultsync.exceptions import InvalidKeyError, StorageError

DEFAULT_LIST_LIMIT = 1000


@dataclass
class StoredObject:
    """Metadata (and, from get(), the body) of one stored object."""

    key: str
    size: int
    uploaded: datetime
    etag: str
    content_type: str = "application/octet-stream"
    custom_metadata: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def to_listing(self) -> dict[str, Any]:
        """Shape used in the ``files`` array of GET /api/list."""
        return {
            "key": self.key,
            "size": self.size,
            "uploaded": self.uploaded.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "httpEtag": self.etag,
            "customMetadata": dict(self.custom_metadata),
            "md5": self.custom_metadata.get("md5") or None,
        }


@dataclass
class ListPage:
    objects: list[StoredObject]
    truncated: bool = False
    cursor: str | None = None


def make_etag(data: bytes) -> str:
    return f'"{hashlib.md5(data).hexdigest()}"'


def validate_key(key: str) -> str:
    """Reject keys that cannot name an object (empty, absolute, or with '.'/'..' segments)."""
    if not key or key.startswith("/") or "\x00" in key:
        raise InvalidKeyError(key)
    if any(segment in ("", ".", "..") for segment in key.split("/")):
        raise InvalidKeyError(key)
    return key


def paginate_keys(keys: Iterable[str], prefix: str, cursor: str | None, limit: int) -> tuple[list[str], bool, str | None]:
    """
    Select one page of ``keys``.

    Returns ``(page_keys, truncated, next_cursor)``; ``next_cursor`` is None on the last page.
    """
    if limit < 1:
        raise StorageError(f"limit must be >= 1, got {limit}")
    candidates = sorted(k for k in keys if k.startswith(prefix) and (cursor is None or k > cursor))
    page = candidates[:limit]
    truncated = len(candidates) > limit
    return page, truncated, (page[-1] if truncated and page else None)


class ObjectStore(ABC):
    """
    Base class for object store backends.

    Subclasses implement storage-specific persistence; pagination and key
    validation are shared.
    """

    @abstractmethod
    async def list(self, prefix: str = "", cursor: str | None = None, limit: int = DEFAULT_LIST_LIMIT) -> ListPage:
        """List objects under ``prefix`` after ``cursor``."""

    @abstractmethod
    async def get(self, key: str) -> StoredObject | None:
        """Return the object with its body, or None if missing."""

    @abstractmethod
    async def put(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str | None = None,
        custom_metadata: dict[str, str] | None = None,
    ) -> StoredObject:
        """Create or overwrite an object."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete an object. Deleting a missing key is not an error."""

    async def list_all(self, prefix: str = "") -> list[StoredObject]:
        """Follow the cursor through every page."""
        objects: list[StoredObject] = []
        cursor = None
        while True:
            page = await self.list(prefix=prefix, cursor=cursor)
            objects.extend(page.objects)
            if not page.truncated:
                return objects
            cursor = page.cursor

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
