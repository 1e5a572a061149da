"""
Type definitions for snapshots, plans and run outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any, Protocol


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 timestamp from listing metadata.

    Returns None for missing or malformed values. Naive timestamps are taken
    to be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Format a timestamp the way it is stored remotely (UTC, millisecond precision)."""
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def truncate_to_millis(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


@dataclass(frozen=True)
class LocalFileDescriptor:
    """A file found by the local scanner."""

    relative_path: str  # posix separators, join key against remote keys
    absolute_path: Path
    size_bytes: int
    modified_at: datetime
    content_hash: str | None = None


@dataclass(frozen=True)
class RemoteFileRecord:
    """One object in the remote listing."""

    key: str
    size_bytes: int
    uploaded_at: datetime
    custom_modified_at: datetime | None = None
    content_hash: str | None = None

    @property
    def effective_modified_at(self) -> datetime:
        """The client-reported modification time, else the upload time."""
        return self.custom_modified_at or self.uploaded_at

    @classmethod
    def from_listing(cls, entry: dict[str, Any]) -> RemoteFileRecord:
        """
        Build a record from one ``files`` entry of a listing page.

        Missing or malformed ``customMetadata`` never raises; the record just
        falls back to the upload timestamp.
        """
        metadata = entry.get("customMetadata")
        if not isinstance(metadata, dict):
            metadata = {}
        uploaded = parse_timestamp(entry.get("uploaded")) or datetime.fromtimestamp(0, tz=UTC)
        content_hash = metadata.get("md5") or entry.get("md5") or None
        return cls(
            key=entry["key"],
            size_bytes=int(entry.get("size") or 0),
            uploaded_at=uploaded,
            custom_modified_at=parse_timestamp(metadata.get("modified")),
            content_hash=content_hash,
        )


@dataclass(frozen=True)
class ReconciliationPlan:
    """Uploads and deletions that make the remote store match the local tree."""

    uploads: tuple[LocalFileDescriptor, ...] = ()
    deletions: tuple[str, ...] = ()

    @property
    def in_sync(self) -> bool:
        return not self.uploads and not self.deletions

    @property
    def total(self) -> int:
        return len(self.uploads) + len(self.deletions)

    @property
    def upload_keys(self) -> list[str]:
        return [f.relative_path for f in self.uploads]


class OutcomeStatus(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class ItemOutcome:
    """Result of uploading or deleting a single key."""

    key: str
    status: OutcomeStatus
    error_detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @classmethod
    def success(cls, key: str) -> ItemOutcome:
        return cls(key=key, status=OutcomeStatus.SUCCESS)

    @classmethod
    def error(cls, key: str, detail: str) -> ItemOutcome:
        return cls(key=key, status=OutcomeStatus.ERROR, error_detail=detail)


UploadOutcome = ItemOutcome
DeletionOutcome = ItemOutcome


@dataclass
class SyncReport:
    """Aggregated result of one sync run."""

    scanned: int = 0
    remote_count: int = 0
    plan: ReconciliationPlan = field(default_factory=ReconciliationPlan)
    uploads: list[ItemOutcome] = field(default_factory=list)
    deletions: list[ItemOutcome] = field(default_factory=list)
    oversized: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def uploaded(self) -> int:
        return sum(1 for o in self.uploads if o.ok)

    @property
    def deleted(self) -> int:
        return sum(1 for o in self.deletions if o.ok)

    @property
    def upload_failures(self) -> list[ItemOutcome]:
        return [o for o in self.uploads if not o.ok]

    @property
    def deletion_failures(self) -> list[ItemOutcome]:
        return [o for o in self.deletions if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.upload_failures and not self.deletion_failures

    def summary_lines(self) -> list[str]:
        """Human-readable summary: counts first, then one line per failure."""
        if self.dry_run:
            lines = [
                f"Dry run: {len(self.plan.uploads)} to upload, {len(self.plan.deletions)} to delete "
                f"({self.scanned} local, {self.remote_count} remote)"
            ]
            lines.extend(f"  upload {key}" for key in self.plan.upload_keys)
            lines.extend(f"  delete {key}" for key in self.plan.deletions)
            return lines

        lines = [
            f"Uploaded: {self.uploaded}/{len(self.uploads)}",
            f"Deleted: {self.deleted}/{len(self.deletions)}",
            f"Upload failures: {len(self.upload_failures)}",
            f"Deletion failures: {len(self.deletion_failures)}",
        ]
        if self.oversized:
            lines.append(f"Skipped oversized: {len(self.oversized)}")
        for outcome in self.upload_failures:
            lines.append(f"  upload failed: {outcome.key}: {outcome.error_detail}")
        for outcome in self.deletion_failures:
            lines.append(f"  delete failed: {outcome.key}: {outcome.error_detail}")
        return lines


class ChangeDetector(Protocol):
    """
    Decides whether a file present on both sides needs re-uploading.

    Implementations must be pure: no I/O, no mutation of their arguments.
    """

    def has_changed(self, local: LocalFileDescriptor, remote: RemoteFileRecord) -> bool: ...


class PageSource(Protocol):
    """Anything that can return one page of the remote listing."""

    async def list_page(self, prefix: str = "", cursor: str | None = None) -> dict[str, Any]: ...
