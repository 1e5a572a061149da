"""
vaultsync exception hierarchy.

All domain-specific exceptions inherit from VaultSyncError, so callers can
catch any sync failure with a single base class while still handling
individual failure kinds where it matters.

Hierarchy::

    VaultSyncError
    ├── ConfigurationError      - config loading, parsing, validation
    ├── TransportError          - network failure or non-2xx response
    │   └── SnapshotFetchError  - remote listing failed, run must abort
    ├── LocalReadError          - file vanished or unreadable during upload prep
    ├── LocalScanError          - vault directory or file could not be scanned
    └── StorageError            - object store backend failures
        └── InvalidKeyError     - key cannot name an object
"""

from __future__ import annotations


class VaultSyncError(Exception):
    """Base exception for all vaultsync errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(VaultSyncError):
    """Raised when configuration loading, parsing, or validation fails."""


# --- Transport ---------------------------------------------------------------


class TransportError(VaultSyncError):
    """Raised when a request to the remote store fails.

    ``status`` is the HTTP status when a response was received, ``None`` for
    connection errors and timeouts.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message, details={"status": status, "url": url})
        self.status = status
        self.body = body
        self.url = url


class SnapshotFetchError(TransportError):
    """Raised when the remote inventory cannot be fetched completely.

    Reconciliation against a partial listing would delete or skip the wrong
    files, so this aborts the run before planning.
    """


# --- Local files -------------------------------------------------------------


class LocalReadError(VaultSyncError):
    """Raised when a local file cannot be read while preparing an upload."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Cannot read {path}: {message}", details={"path": path})
        self.path = path


class LocalScanError(VaultSyncError):
    """Raised when part of the vault cannot be listed or stat'ed.

    An incomplete local inventory would turn every remote file under the
    unreadable path into an orphan, so the run stops before planning.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"Cannot scan {path}: {message}", details={"path": path})
        self.path = path


# --- Storage backends --------------------------------------------------------


class StorageError(VaultSyncError):
    """Raised when an object store backend fails."""


class InvalidKeyError(StorageError):
    """Raised when a key is empty, absolute, escapes the store root or is reserved."""

    def __init__(self, key: str, reason: str = "invalid object key") -> None:
        super().__init__(f"{reason}: {key!r}", details={"key": key})
        self.key = key
