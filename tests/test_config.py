"""
Tests for configuration loading.

Tests cover:
- Defaults
- YAML file loading with ${VAR} substitution
- Environment variable overrides
- Validation errors
"""

from pathlib import Path

import pytest

from vaultsync.config.loader import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_FILE_SIZE,
    SyncConfig,
    load_config,
    normalize_extensions,
)
from vaultsync.config.resolver import resolve_config
from vaultsync.exceptions import ConfigurationError


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


class TestLoadFromEnvironment:
    def test_minimal_environment(self, vault):
        config = load_config(environ={"VAULT_PATH": str(vault), "REMOTE_ENDPOINT": "https://vault.example.com"})

        assert config.vault_root == vault
        assert config.remote_endpoint == "https://vault.example.com"
        assert config.batch_size == DEFAULT_BATCH_SIZE
        assert config.max_file_size_bytes == DEFAULT_MAX_FILE_SIZE
        assert config.max_retries == 1
        assert ".md" in config.allowed_extensions
        assert ".obsidian" in config.ignored_directories

    def test_worker_url_alias(self, vault):
        config = load_config(environ={"VAULT_PATH": str(vault), "WORKER_URL": "https://w.example.com"})
        assert config.remote_endpoint == "https://w.example.com"

    def test_numeric_overrides(self, vault):
        config = load_config(
            environ={
                "VAULT_PATH": str(vault),
                "REMOTE_ENDPOINT": "http://x",
                "VAULTSYNC_BATCH_SIZE": "10",
                "VAULTSYNC_MAX_FILE_SIZE": "2048",
                "SYNC_TOKEN": "secret",
            }
        )
        assert config.batch_size == 10
        assert config.max_file_size_bytes == 2048
        assert config.sync_token == "secret"

    def test_invalid_numeric_value(self, vault):
        with pytest.raises(ConfigurationError):
            load_config(environ={"VAULT_PATH": str(vault), "REMOTE_ENDPOINT": "http://x", "VAULTSYNC_BATCH_SIZE": "ten"})


class TestLoadFromFile:
    def test_yaml_with_substitution(self, tmp_path, vault):
        config_file = _write(
            tmp_path / "vaultsync.yaml",
            f"""
vault_path: {vault}
remote_endpoint: ${{ENDPOINT}}
batch_size: 20
allowed_extensions: [md, .PNG]
ignored_directories: [private]
change_detection: hash
logging:
  level: DEBUG
""",
        )

        config = load_config(config_file, environ={"ENDPOINT": "https://from-env.example.com"})

        assert config.remote_endpoint == "https://from-env.example.com"
        assert config.batch_size == 20
        assert config.allowed_extensions == frozenset({".md", ".png"})
        assert config.ignored_directories == frozenset({"private"})
        assert config.change_detection == "hash"
        assert config.logging == {"level": "DEBUG"}

    def test_environment_overrides_file(self, tmp_path, vault):
        config_file = _write(tmp_path / "c.yaml", f"vault_path: {vault}\nremote_endpoint: http://file\n")

        config = load_config(config_file, environ={"REMOTE_ENDPOINT": "http://env"})

        assert config.remote_endpoint == "http://env"

    def test_config_path_from_environment(self, tmp_path, vault):
        config_file = _write(tmp_path / "c.yaml", f"vault_path: {vault}\nremote_endpoint: http://file\n")

        config = load_config(environ={"VAULTSYNC_CONFIG": str(config_file)})

        assert config.remote_endpoint == "http://file"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_invalid_yaml_reports_location(self, tmp_path):
        config_file = _write(tmp_path / "bad.yaml", "vault_path: [unclosed\n")

        with pytest.raises(ConfigurationError, match="line"):
            load_config(config_file, environ={})

    def test_non_mapping_yaml(self, tmp_path):
        config_file = _write(tmp_path / "list.yaml", "- a\n- b\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(config_file, environ={})


class TestValidation:
    def test_missing_vault_and_endpoint_are_both_reported(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(environ={})

        errors = exc_info.value.details["errors"]
        assert any("vault root" in e for e in errors)
        assert any("remote endpoint" in e for e in errors)

    def test_requirements_can_be_relaxed(self):
        config = load_config(environ={}, require_vault=False, require_endpoint=False)
        assert config.vault_root is None

    def test_vault_must_be_directory(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not a directory"):
            load_config(environ={"VAULT_PATH": str(tmp_path / "nope"), "REMOTE_ENDPOINT": "http://x"})

    @pytest.mark.parametrize(
        "field,value",
        [
            ("batch_size", 0),
            ("max_file_size_bytes", 0),
            ("delete_concurrency", 0),
            ("request_timeout", 0),
            ("max_retries", 0),
            ("change_detection", "mtime"),
        ],
    )
    def test_invalid_values(self, field, value):
        config = SyncConfig().with_overrides(**{field: value})
        with pytest.raises(ConfigurationError):
            config.validate(require_vault=False, require_endpoint=False)


class TestHelpers:
    def test_normalize_extensions(self):
        assert normalize_extensions(["MD", ".Png", " ", "txt"]) == frozenset({".md", ".png", ".txt"})

    def test_resolve_config_leaves_unknown_variables(self):
        data = {"a": "${KNOWN}", "b": ["${UNKNOWN}"], "c": 3}
        assert resolve_config(data, {"KNOWN": "yes"}) == {"a": "yes", "b": ["${UNKNOWN}"], "c": 3}
