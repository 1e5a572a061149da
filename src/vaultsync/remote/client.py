"""
HTTP client for the remote storage facade.

Wraps the list / batch-sync / per-file endpoints with a shared aiohttp
session, a per-request timeout, a concurrency cap and optional retries.
Every failure surfaces as TransportError.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any
from urllib.parse import quote

import aiohttp

from vaultsync.exceptions import TransportError
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.remote.client")


def encode_key(key: str) -> str:
    """Percent-encode each path segment of ``key``, keeping the slashes."""
    return "/".join(quote(segment, safe="") for segment in key.split("/"))


class RemoteStoreClient:
    """
    Async client for the storage facade.

    Example:
        ```python
        async with RemoteStoreClient("https://vault.example.com") as client:
            page = await client.list_page()
            await client.delete_file("notes/old.md")
        ```
    """

    def __init__(
        self,
        base_url: str,
        headers: dict[str, str] | None = None,
        max_concurrent: int = 10,
        max_retries: int = 1,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            base_url: Facade base URL (e.g., "https://vault.example.com")
            headers: Default headers to include in all requests
            max_concurrent: Maximum concurrent requests (default: 10)
            max_retries: Attempts per request, 1 disables retrying (default: 1)
            retry_delay: Base delay between attempts in seconds (default: 1.0)
            timeout: Per-request timeout in seconds (default: 30)
        """
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self.base_url = base_url.rstrip("/")
        self.default_headers = headers or {}
        self.max_concurrent = max_concurrent
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = aiohttp.ClientTimeout(total=timeout)

        self.session: aiohttp.ClientSession | None = None
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self._session_lock = asyncio.Lock()
        self._session_refcount = 0

    async def _ensure_session(self) -> None:
        """Ensure session exists, creating it if needed."""
        async with self._session_lock:
            if self.session is None or self.session.closed:
                self.session = aiohttp.ClientSession(timeout=self.timeout, headers=self.default_headers)

    async def __aenter__(self) -> RemoteStoreClient:
        await self._ensure_session()
        async with self._session_lock:
            self._session_refcount += 1
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        async with self._session_lock:
            self._session_refcount -= 1
            # Only close session if no other contexts are using it
            if self._session_refcount == 0 and self.session and not self.session.closed:
                await self.session.close()
                self.session = None

    async def close(self) -> None:
        """Explicitly close the session."""
        async with self._session_lock:
            if self.session and not self.session.closed:
                await self.session.close()
                self.session = None
            self._session_refcount = 0

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, str] | None = None,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
        raw: bool = False,
        allow_not_found: bool = False,
    ) -> Any:
        """
        Issue one request, retrying connection errors, timeouts and 5xx responses.

        Returns the decoded JSON body, or ``(body, etag, content_type)`` when
        ``raw`` is set, or None for a 404 when ``allow_not_found`` is set.

        Raises:
            TransportError: If the request fails after all attempts
        """
        await self._ensure_session()
        url = f"{self.base_url}{path}"

        async with self.semaphore:
            attempt = 0
            while True:
                attempt += 1
                try:
                    if self.session is None or self.session.closed:
                        await self._ensure_session()
                    assert self.session is not None

                    start_time = time.monotonic()
                    async with self.session.request(
                        method,
                        url,
                        json=json_body,
                        params=params,
                        data=data,
                        headers=headers,
                    ) as response:
                        duration = time.monotonic() - start_time
                        log_level = logger.debug if response.status <= 299 else logger.warning
                        log_level(f"{method} {url} {response.status} {duration:.2f}s")

                        if allow_not_found and response.status == 404:
                            return None
                        if response.status > 299:
                            text = await response.text()
                            raise TransportError(
                                f"{method} {path} failed: {response.status} {text[:200]}".rstrip(),
                                status=response.status,
                                body=text[:200],
                                url=url,
                            )
                        if raw:
                            body = await response.read()
                            return body, response.headers.get("ETag"), response.content_type
                        return await response.json(content_type=None)

                except TransportError as e:
                    # Client errors will not improve on retry
                    if (e.status is not None and e.status < 500) or attempt >= self.max_retries:
                        raise
                    logger.debug(f"Retry {attempt}/{self.max_retries} for {method} {path}: {e.message}")

                except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                    reason = str(e) or type(e).__name__
                    if attempt >= self.max_retries:
                        raise TransportError(f"{method} {path} failed: {reason}", url=url) from e
                    logger.debug(f"Retry {attempt}/{self.max_retries} for {method} {path}: {reason}")

                await asyncio.sleep(self.retry_delay * attempt)

    async def list_page(self, prefix: str = "", cursor: str | None = None, limit: int | None = None) -> dict[str, Any]:
        """
        GET /api/list - one page of the remote inventory.

        Returns the raw page: ``{"files": [...], "truncated": bool, "cursor": str | None}``.
        """
        params: dict[str, str] = {}
        if prefix:
            params["prefix"] = prefix
        if cursor:
            params["cursor"] = cursor
        if limit is not None:
            params["limit"] = str(limit)
        page = await self._request("GET", "/api/list", params=params or None)
        if not isinstance(page, dict):
            raise TransportError("GET /api/list returned a non-object body", url=f"{self.base_url}/api/list")
        return page

    async def sync_batch(self, items: list[dict[str, Any]]) -> dict[str, Any]:
        """
        POST /api/sync - store a batch of base64-encoded files.

        Returns ``{"results": [{"path", "status", "error"?}, ...]}``.
        """
        result = await self._request("POST", "/api/sync", json_body=items)
        if not isinstance(result, dict):
            raise TransportError("POST /api/sync returned a non-object body", url=f"{self.base_url}/api/sync")
        return result

    async def get_file(self, key: str) -> tuple[bytes, str | None, str | None] | None:
        """GET /files/{key} - returns ``(body, etag, content_type)`` or None if missing."""
        return await self._request("GET", f"/files/{encode_key(key)}", raw=True, allow_not_found=True)  # type: ignore[no-any-return]

    async def put_file(self, key: str, data: bytes, content_type: str | None = None) -> dict[str, Any]:
        """PUT /files/{key} - store raw bytes."""
        headers = {"Content-Type": content_type} if content_type else None
        return await self._request("PUT", f"/files/{encode_key(key)}", data=data, headers=headers)  # type: ignore[no-any-return]

    async def delete_file(self, key: str) -> dict[str, Any]:
        """DELETE /files/{key} - idempotent on the server side."""
        return await self._request("DELETE", f"/files/{encode_key(key)}")  # type: ignore[no-any-return]

    async def delete_all(self) -> dict[str, Any]:
        """DELETE /api/delete-all - administrative wipe, bypasses reconciliation."""
        return await self._request("DELETE", "/api/delete-all")  # type: ignore[no-any-return]
