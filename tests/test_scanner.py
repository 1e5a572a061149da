"""Tests for the local vault scanner."""

import hashlib
import logging
from datetime import UTC, datetime

import pytest
from conftest import set_mtime, write_vault

from vaultsync.config.loader import DEFAULT_ALLOWED_EXTENSIONS, DEFAULT_IGNORED_DIRECTORIES, SyncConfig
from vaultsync.sync.scanner import DEFAULT_CONTENT_TYPE, content_type_for, scan_from_config, scan_vault


def _scan(root, **kwargs):
    options = {
        "allowed_extensions": DEFAULT_ALLOWED_EXTENSIONS,
        "ignored_directories": DEFAULT_IGNORED_DIRECTORIES,
        "max_file_size_bytes": 1024,
    }
    options.update(kwargs)
    return scan_vault(root, **options)


class TestScanVault:
    def test_relative_posix_paths_in_sorted_order(self, vault):
        write_vault(vault, {"b.md": "b", "a/z.md": "z", "a/c.md": "c", "img/p.png": b"png"})

        result = _scan(vault)

        assert [f.relative_path for f in result.files] == ["b.md", "a/c.md", "a/z.md", "img/p.png"]

    def test_filters_extensions(self, vault):
        write_vault(vault, {"a.md": "a", "script.py": "x", "UPPER.MD": "A", "noext": "n"})

        result = _scan(vault)

        assert [f.relative_path for f in result.files] == ["UPPER.MD", "a.md"]

    def test_prunes_ignored_directories_at_any_depth(self, vault):
        write_vault(
            vault,
            {
                ".obsidian/workspace.json": "{}",
                "notes/.trash/old.md": "old",
                "project/node_modules/readme.md": "x",
                ".git/config.md": "x",
                "notes/keep.md": "keep",
            },
        )

        result = _scan(vault)

        assert [f.relative_path for f in result.files] == ["notes/keep.md"]

    def test_oversized_files_are_reported_not_returned(self, vault, caplog):
        write_vault(vault, {"big.md": "x" * 2048, "small.md": "x"})

        with caplog.at_level(logging.WARNING, logger="vaultsync"):
            result = _scan(vault)

        assert [f.relative_path for f in result.files] == ["small.md"]
        assert result.oversized == ["big.md"]
        assert "Skipping large file" in caplog.text

    def test_descriptor_fields(self, vault):
        write_vault(vault, {"a.md": "hello"})
        when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        set_mtime(vault / "a.md", when)

        descriptor = _scan(vault).files[0]

        assert descriptor.size_bytes == 5
        assert descriptor.modified_at == when
        assert descriptor.absolute_path == vault / "a.md"
        assert descriptor.content_hash is None

    def test_compute_hashes(self, vault):
        write_vault(vault, {"a.md": "hello"})

        descriptor = _scan(vault, compute_hashes=True).files[0]

        assert descriptor.content_hash == hashlib.md5(b"hello").hexdigest()

    def test_warns_on_case_collision(self, vault, caplog):
        write_vault(vault, {"Notes/a.md": "1", "notes/a.md": "2"})
        paths = {p.relative_to(vault).as_posix() for p in vault.rglob("*.md")}
        if len(paths) < 2:
            pytest.skip("case-insensitive filesystem")

        with caplog.at_level(logging.WARNING, logger="vaultsync"):
            result = _scan(vault)

        assert len(result.files) == 2
        assert "differ only by case" in caplog.text


class TestScanFromConfig:
    def test_uses_config_filters(self, vault):
        write_vault(vault, {"a.md": "a", "b.txt": "b", "skip/c.md": "c"})
        config = SyncConfig(
            vault_root=vault,
            allowed_extensions=frozenset({".md"}),
            ignored_directories=frozenset({"skip"}),
            change_detection="hash",
        )

        result = scan_from_config(config)

        assert [f.relative_path for f in result.files] == ["a.md"]
        assert result.files[0].content_hash is not None


class TestContentType:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("a.md", "text/markdown"),
            ("b/C.PNG", "image/png"),
            ("d.excalidraw", "application/json"),
            ("e.svg", "image/svg+xml"),
            ("f.unknown", DEFAULT_CONTENT_TYPE),
        ],
    )
    def test_lookup(self, path, expected):
        assert content_type_for(path) == expected
