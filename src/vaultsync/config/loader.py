"""
Configuration loading.

A sync run is configured by an optional YAML file plus environment variables
(``VAULT_PATH``, ``REMOTE_ENDPOINT``, ...). Environment variables win over the
file, so the same file can be shared between machines.
"""

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from vaultsync.config.resolver import resolve_config
from vaultsync.exceptions import ConfigurationError

DEFAULT_BATCH_SIZE = 50
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_ALLOWED_EXTENSIONS = frozenset(
    {
        ".md",
        ".txt",
        ".json",
        ".yml",
        ".yaml",
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".svg",
        ".webp",
        ".pdf",
        ".csv",
        ".excalidraw",
    }
)
DEFAULT_IGNORED_DIRECTORIES = frozenset({".obsidian", ".trash", "node_modules", ".git"})
CHANGE_DETECTION_MODES = ("metadata", "hash")

CONFIG_ENV_VAR = "VAULTSYNC_CONFIG"


@dataclass(frozen=True)
class SyncConfig:
    """
    Explicit configuration for one sync run.

    Passed to the scanner, executor and runner at construction; nothing in the
    engine reads the environment directly.
    """

    vault_root: Path | None = None
    remote_endpoint: str | None = None
    batch_size: int = DEFAULT_BATCH_SIZE
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE
    allowed_extensions: frozenset[str] = DEFAULT_ALLOWED_EXTENSIONS
    ignored_directories: frozenset[str] = DEFAULT_IGNORED_DIRECTORIES
    delete_concurrency: int = 8
    request_timeout: float = 30.0
    max_retries: int = 1
    change_detection: str = "metadata"
    sync_token: str | None = None
    logging: dict[str, Any] = field(default_factory=dict, compare=False)

    def validate(self, *, require_vault: bool = True, require_endpoint: bool = True) -> None:
        """Validate configuration values, raising ConfigurationError listing every problem."""
        errors = []

        if require_vault:
            if self.vault_root is None:
                errors.append("vault root is not set (VAULT_PATH or 'vault_path')")
            elif not self.vault_root.is_dir():
                errors.append(f"vault root is not a directory: {self.vault_root}")
        if require_endpoint and not self.remote_endpoint:
            errors.append("remote endpoint is not set (REMOTE_ENDPOINT or 'remote_endpoint')")
        if self.batch_size < 1:
            errors.append(f"batch_size must be >= 1, got {self.batch_size}")
        if self.max_file_size_bytes < 1:
            errors.append(f"max_file_size must be >= 1, got {self.max_file_size_bytes}")
        if self.delete_concurrency < 1:
            errors.append(f"delete_concurrency must be >= 1, got {self.delete_concurrency}")
        if self.request_timeout <= 0:
            errors.append(f"request_timeout must be > 0, got {self.request_timeout}")
        if self.max_retries < 1:
            errors.append(f"max_retries must be >= 1, got {self.max_retries}")
        if self.change_detection not in CHANGE_DETECTION_MODES:
            errors.append(
                f"change_detection must be one of {', '.join(CHANGE_DETECTION_MODES)}, got '{self.change_detection}'"
            )

        if errors:
            raise ConfigurationError("Invalid configuration:\n  " + "\n  ".join(errors), details={"errors": errors})

    def with_overrides(self, **changes: Any) -> "SyncConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    require_vault: bool = True,
    require_endpoint: bool = True,
) -> SyncConfig:
    """
    Load sync configuration.

    Args:
        path: Optional YAML config file (default: ``$VAULTSYNC_CONFIG`` if set)
        environ: Environment mapping (default: os.environ)
        require_vault: Fail if no vault root is configured
        require_endpoint: Fail if no remote endpoint is configured

    Returns:
        Validated SyncConfig

    Raises:
        ConfigurationError: If the file cannot be parsed or values are invalid
    """
    environ = os.environ if environ is None else environ

    if path is None and environ.get(CONFIG_ENV_VAR):
        path = environ[CONFIG_ENV_VAR]

    data: dict[str, Any] = {}
    if path is not None:
        data = resolve_config(_read_yaml(Path(path)), environ)

    values = _from_mapping(data)
    values.update(_from_environ(environ))

    config = SyncConfig(**values)
    config.validate(require_vault=require_vault, require_endpoint=require_endpoint)
    return config


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration file not found: {config_path}", details={"path": str(config_path)})

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        location = f" at line {mark.line + 1}, column {mark.column + 1}" if mark is not None else ""
        raise ConfigurationError(
            f"Error parsing {config_path.name}{location}: {e}", details={"path": str(config_path)}
        ) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {config_path}: {e}", details={"path": str(config_path)}) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration must be a mapping, got {type(data).__name__}", details={"path": str(config_path)}
        )
    return data


def _from_mapping(data: dict[str, Any]) -> dict[str, Any]:
    """Translate config file keys into SyncConfig fields."""
    values: dict[str, Any] = {}
    try:
        if data.get("vault_path"):
            values["vault_root"] = Path(data["vault_path"]).expanduser()
        if data.get("remote_endpoint"):
            values["remote_endpoint"] = str(data["remote_endpoint"])
        if "batch_size" in data:
            values["batch_size"] = int(data["batch_size"])
        if "max_file_size" in data:
            values["max_file_size_bytes"] = int(data["max_file_size"])
        if "allowed_extensions" in data:
            values["allowed_extensions"] = normalize_extensions(data["allowed_extensions"])
        if "ignored_directories" in data:
            values["ignored_directories"] = frozenset(str(d) for d in data["ignored_directories"])
        if "delete_concurrency" in data:
            values["delete_concurrency"] = int(data["delete_concurrency"])
        if "request_timeout" in data:
            values["request_timeout"] = float(data["request_timeout"])
        if "max_retries" in data:
            values["max_retries"] = int(data["max_retries"])
        if "change_detection" in data:
            values["change_detection"] = str(data["change_detection"])
        if data.get("sync_token"):
            values["sync_token"] = str(data["sync_token"])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}") from e

    if isinstance(data.get("logging"), dict):
        values["logging"] = data["logging"]
    return values


def _from_environ(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    if environ.get("VAULT_PATH"):
        values["vault_root"] = Path(environ["VAULT_PATH"]).expanduser()
    # WORKER_URL is the name older deployments used
    endpoint = environ.get("REMOTE_ENDPOINT") or environ.get("WORKER_URL")
    if endpoint:
        values["remote_endpoint"] = endpoint
    if environ.get("SYNC_TOKEN"):
        values["sync_token"] = environ["SYNC_TOKEN"]
    try:
        if environ.get("VAULTSYNC_BATCH_SIZE"):
            values["batch_size"] = int(environ["VAULTSYNC_BATCH_SIZE"])
        if environ.get("VAULTSYNC_MAX_FILE_SIZE"):
            values["max_file_size_bytes"] = int(environ["VAULTSYNC_MAX_FILE_SIZE"])
    except ValueError as e:
        raise ConfigurationError(f"Invalid environment value: {e}") from e
    return values


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Lower-case extensions and make sure each starts with a dot."""
    normalized = set()
    for ext in extensions:
        ext = str(ext).strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(normalized)
