"""
Remote snapshot assembly.

Follows the listing cursor until the store reports no more pages. The result
is all-or-nothing: a failed page aborts the whole fetch.
"""

from __future__ import annotations

from vaultsync.exceptions import SnapshotFetchError, TransportError
from vaultsync.sync.types import PageSource, RemoteFileRecord
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.sync.snapshot")


async def fetch_remote_snapshot(source: PageSource, prefix: str = "") -> dict[str, RemoteFileRecord]:
    """
    Fetch every remote record under ``prefix``.

    Pages are requested sequentially because each cursor comes from the
    previous response. A key listed twice keeps its last record.

    Raises:
        SnapshotFetchError: If any page request fails or a page is malformed
    """
    snapshot: dict[str, RemoteFileRecord] = {}
    cursor: str | None = None
    pages = 0

    while True:
        try:
            page = await source.list_page(prefix=prefix, cursor=cursor)
        except TransportError as e:
            raise SnapshotFetchError(
                f"Failed to fetch remote files (page {pages + 1}): {e.message}",
                status=e.status,
                body=e.body,
                url=e.url,
            ) from e
        pages += 1

        try:
            for entry in page.get("files") or []:
                record = RemoteFileRecord.from_listing(entry)
                snapshot[record.key] = record
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SnapshotFetchError(f"Malformed listing page {pages}: {e}") from e

        if not page.get("truncated"):
            break

        next_cursor = page.get("cursor")
        if not next_cursor:
            raise SnapshotFetchError(f"Listing page {pages} is truncated but has no cursor")
        cursor = next_cursor
        logger.info(f"Fetched {len(snapshot)} files so far...")

    logger.debug(f"Remote snapshot complete: {len(snapshot)} files in {pages} page(s)")
    return snapshot
