"""
Object store endpoints: listing, batch upload, per-file access, delete-all.
"""

import base64
import binascii
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote

from aiohttp import web

from vaultsync.exceptions import StorageError
from vaultsync.service.api.errors import NotFoundError, ValidationError
from vaultsync.service.api.handlers import BaseHandler
from vaultsync.storage.base import DEFAULT_LIST_LIMIT, ObjectStore
from vaultsync.utils.async_utils import gather_bounded
from vaultsync.utils.logging import get_logger

if TYPE_CHECKING:
    from vaultsync.service.server import StorageService

logger = get_logger("vaultsync.api.files")

FILES_PREFIX = "/files/"
MAX_LIST_LIMIT = 1000


def key_from_request(request: web.Request) -> str:
    """
    Extract the object key from ``/files/{urlEncodedPath}``.

    The raw path is percent-decoded exactly once, so keys may contain encoded
    slashes or percent signs.
    """
    raw_path = request.raw_path.split("?", 1)[0]
    index = raw_path.find(FILES_PREFIX)
    if index == -1:
        raise ValidationError("Missing object key")
    key = unquote(raw_path[index + len(FILES_PREFIX) :])
    if not key:
        raise ValidationError("Missing object key")
    return key


class FilesHandler(BaseHandler):
    """Handler for the storage facade endpoints."""

    service: "StorageService"

    @property
    def store(self) -> ObjectStore:
        return self.service.store

    async def list(self, request: web.Request) -> web.Response:
        """
        GET /api/list?prefix=&cursor=&limit=

        Returns one page of objects plus ``truncated``/``cursor`` for the next page.
        """
        prefix = request.query.get("prefix", "")
        cursor = request.query.get("cursor") or None
        try:
            limit = int(request.query.get("limit", self.service.list_limit))
        except ValueError:
            raise ValidationError("limit must be an integer", details={"limit": request.query.get("limit")}) from None
        if not 1 <= limit <= MAX_LIST_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIST_LIMIT}", details={"limit": limit})

        page = await self.store.list(prefix=prefix, cursor=cursor, limit=limit)
        data = {
            "files": [obj.to_listing() for obj in page.objects],
            "truncated": page.truncated,
            "cursor": page.cursor,
        }
        return await self.json_response(data, request=request)

    async def bulk_sync(self, request: web.Request) -> web.Response:
        """
        POST /api/sync

        Body is an array of ``{path, content (base64), type, modified, md5}``.
        Each item is stored independently; one bad item does not fail the others.
        """
        files = await request.json()
        if not isinstance(files, list):
            raise ValidationError("Request body must be an array of files")

        results: list[dict[str, Any]] = []
        for item in files:
            path = item.get("path") if isinstance(item, dict) else None
            try:
                if not isinstance(path, str) or not path:
                    raise ValueError("missing 'path'")
                content = base64.b64decode(item.get("content") or "", validate=True)
                await self.store.put(
                    path,
                    content,
                    content_type=item.get("type") or "text/markdown",
                    custom_metadata={
                        "modified": item.get("modified") or datetime.now(UTC).isoformat(),
                        "md5": item.get("md5") or "",
                    },
                )
                results.append({"path": path, "status": "success"})
            except (StorageError, ValueError, binascii.Error, TypeError) as e:
                message = e.message if isinstance(e, StorageError) else str(e)
                logger.warning(f"Failed to store {path}: {message}")
                results.append({"path": path, "status": "error", "error": message})

        return await self.json_response({"results": results}, request=request)

    async def get_file(self, request: web.Request) -> web.Response:
        """GET /files/{key} - raw bytes with Content-Type and ETag, 404 if missing."""
        key = key_from_request(request)
        obj = await self.store.get(key)
        if obj is None:
            raise NotFoundError(key)
        return web.Response(
            body=obj.body or b"",
            headers={"Content-Type": obj.content_type, "ETag": obj.etag},
        )

    async def put_file(self, request: web.Request) -> web.Response:
        """PUT /files/{key} - store the raw request body."""
        key = key_from_request(request)
        data = await request.read()
        await self.store.put(key, data, content_type=request.headers.get("Content-Type"))
        return await self.json_response({"message": f"Uploaded {key}"}, request=request)

    async def delete_file(self, request: web.Request) -> web.Response:
        """DELETE /files/{key} - idempotent."""
        key = key_from_request(request)
        await self.store.delete(key)
        return await self.json_response({"message": f"Deleted {key}"}, request=request)

    async def delete_all(self, request: web.Request) -> web.Response:
        """
        DELETE /api/delete-all

        Deletes every object (all pages) through a bounded worker pool and
        waits for every deletion before answering.
        """
        objects = await self.store.list_all()
        keys = [obj.key for obj in objects]
        results = await gather_bounded(self.store.delete, keys, max_concurrency=self.service.delete_concurrency)

        failed = []
        for key, result in zip(keys, results):
            if isinstance(result, Exception):
                logger.error(f"Failed to delete {key}: {result}")
                failed.append(key)
            elif isinstance(result, BaseException):
                raise result

        data: dict[str, Any] = {"message": f"Deleted {len(keys) - len(failed)} files"}
        if failed:
            data["failed"] = failed
        return await self.json_response(data, request=request)
