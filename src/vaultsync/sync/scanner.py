"""
Local inventory scanner.

Walks the vault root, keeps files whose extension is allowed, skips ignored
directory names and files above the size limit.
"""

from __future__ import annotations

import os
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath

from vaultsync.config.loader import SyncConfig
from vaultsync.exceptions import ConfigurationError, LocalScanError
from vaultsync.sync.types import LocalFileDescriptor
from vaultsync.utils.hashing import calculate_file_hash
from vaultsync.utils.logging import get_logger

logger = get_logger("vaultsync.sync.scanner")

CONTENT_TYPES = {
    ".md": "text/markdown",
    ".txt": "text/plain",
    ".json": "application/json",
    ".yml": "text/yaml",
    ".yaml": "text/yaml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".csv": "text/csv",
    ".excalidraw": "application/json",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def content_type_for(path: str) -> str:
    """Static extension lookup; unknown extensions are opaque binary."""
    return CONTENT_TYPES.get(PurePosixPath(path).suffix.lower(), DEFAULT_CONTENT_TYPE)


def _raise_scan_error(error: OSError) -> None:
    raise LocalScanError(str(error.filename or "vault"), error.strerror or str(error)) from error


@dataclass
class ScanResult:
    files: list[LocalFileDescriptor] = field(default_factory=list)
    oversized: list[str] = field(default_factory=list)


def scan_vault(
    root: Path,
    *,
    allowed_extensions: Collection[str],
    ignored_directories: Collection[str],
    max_file_size_bytes: int,
    compute_hashes: bool = False,
) -> ScanResult:
    """
    Scan ``root`` and describe every file eligible for syncing.

    Directory and file names are visited in sorted order so identical trees
    produce identical snapshots. Oversized files are logged as warnings and
    reported in ``ScanResult.oversized`` instead of being returned.

    Args:
        root: Vault root directory
        allowed_extensions: Lower-case extensions including the dot
        ignored_directories: Directory names pruned wherever they appear
        max_file_size_bytes: Files larger than this are skipped
        compute_hashes: Fill ``content_hash`` (MD5) on each descriptor

    Raises:
        LocalScanError: If a directory cannot be listed or a file cannot be stat'ed
    """
    root = Path(root)
    result = ScanResult()
    seen_casefolded: dict[str, str] = {}

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_scan_error):
        dirnames[:] = sorted(d for d in dirnames if d not in ignored_directories)
        current = Path(dirpath)

        for name in sorted(filenames):
            if Path(name).suffix.lower() not in allowed_extensions:
                continue

            full_path = current / name
            relative = full_path.relative_to(root).as_posix()
            try:
                stat = full_path.stat()
            except OSError as e:
                raise LocalScanError(str(full_path), e.strerror or str(e)) from e

            if stat.st_size > max_file_size_bytes:
                logger.warning(f"Skipping large file ({stat.st_size / 1024 / 1024:.2f}MB): {full_path}")
                result.oversized.append(relative)
                continue

            # Keys are case-sensitive; flag paths that collide on case-insensitive stores
            folded = relative.casefold()
            if folded in seen_casefolded:
                logger.warning(f"Paths differ only by case: {seen_casefolded[folded]} and {relative}")
            else:
                seen_casefolded[folded] = relative

            content_hash = None
            if compute_hashes:
                try:
                    content_hash = calculate_file_hash(full_path)
                except OSError as e:
                    logger.warning(f"Could not hash {full_path}: {e}")

            result.files.append(
                LocalFileDescriptor(
                    relative_path=relative,
                    absolute_path=full_path,
                    size_bytes=stat.st_size,
                    modified_at=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
                    content_hash=content_hash,
                )
            )

    return result


def scan_from_config(config: SyncConfig) -> ScanResult:
    """Scan the configured vault root with the configured filters."""
    if config.vault_root is None:
        raise ConfigurationError("vault_root is not configured")
    return scan_vault(
        config.vault_root,
        allowed_extensions=config.allowed_extensions,
        ignored_directories=config.ignored_directories,
        max_file_size_bytes=config.max_file_size_bytes,
        compute_hashes=config.change_detection == "hash",
    )
