"""Tests for remote snapshot pagination."""

import pytest
from conftest import FakeRemote

from vaultsync.exceptions import SnapshotFetchError
from vaultsync.sync.snapshot import fetch_remote_snapshot


def _entry(key: str, size: int = 1, modified: str | None = "2024-05-01T12:00:00.000Z") -> dict:
    entry = {"key": key, "size": size, "uploaded": "2024-04-30T12:00:00.000Z"}
    if modified is not None:
        entry["customMetadata"] = {"modified": modified, "md5": "abc"}
    return entry


@pytest.mark.asyncio
async def test_follows_cursor_across_three_pages():
    remote = FakeRemote(
        pages=[
            {"files": [_entry("a.md"), _entry("b.md")], "truncated": True, "cursor": "c1"},
            {"files": [_entry("c.md"), _entry("d.md")], "truncated": True, "cursor": "c2"},
            {"files": [_entry("e.md")], "truncated": False},
        ]
    )

    snapshot = await fetch_remote_snapshot(remote)

    assert sorted(snapshot) == ["a.md", "b.md", "c.md", "d.md", "e.md"]
    assert remote.page_calls == [("", None), ("", "c1"), ("", "c2")]


@pytest.mark.asyncio
async def test_single_page():
    remote = FakeRemote(pages=[{"files": [_entry("only.md", size=7)], "truncated": False}])

    snapshot = await fetch_remote_snapshot(remote)

    assert snapshot["only.md"].size_bytes == 7
    assert snapshot["only.md"].content_hash == "abc"
    assert len(remote.page_calls) == 1


@pytest.mark.asyncio
async def test_empty_store():
    assert await fetch_remote_snapshot(FakeRemote()) == {}


@pytest.mark.asyncio
async def test_prefix_is_passed_to_every_page():
    remote = FakeRemote(
        pages=[
            {"files": [_entry("blog/a.md")], "truncated": True, "cursor": "blog/a.md"},
            {"files": [_entry("blog/b.md")], "truncated": False},
        ]
    )

    await fetch_remote_snapshot(remote, prefix="blog/")

    assert remote.page_calls == [("blog/", None), ("blog/", "blog/a.md")]


@pytest.mark.asyncio
async def test_page_failure_aborts_whole_fetch():
    remote = FakeRemote(
        pages=[
            {"files": [_entry("a.md")], "truncated": True, "cursor": "c1"},
            {"files": [_entry("b.md")], "truncated": False},
        ],
        fail_page=1,
    )

    with pytest.raises(SnapshotFetchError) as exc_info:
        await fetch_remote_snapshot(remote)

    assert exc_info.value.status == 500
    assert "page 2" in exc_info.value.message


@pytest.mark.asyncio
async def test_truncated_page_without_cursor_fails():
    remote = FakeRemote(pages=[{"files": [_entry("a.md")], "truncated": True}])

    with pytest.raises(SnapshotFetchError, match="no cursor"):
        await fetch_remote_snapshot(remote)


@pytest.mark.asyncio
async def test_malformed_entry_fails():
    remote = FakeRemote(pages=[{"files": [{"size": 3}], "truncated": False}])

    with pytest.raises(SnapshotFetchError, match="Malformed"):
        await fetch_remote_snapshot(remote)


@pytest.mark.asyncio
async def test_duplicate_key_keeps_last_record():
    remote = FakeRemote(
        pages=[
            {"files": [_entry("a.md", size=1)], "truncated": True, "cursor": "a.md"},
            {"files": [_entry("a.md", size=2)], "truncated": False},
        ]
    )

    snapshot = await fetch_remote_snapshot(remote)

    assert snapshot["a.md"].size_bytes == 2


@pytest.mark.asyncio
async def test_missing_custom_metadata_is_tolerated():
    remote = FakeRemote(pages=[{"files": [_entry("a.md", modified=None)], "truncated": False}])

    snapshot = await fetch_remote_snapshot(remote)

    record = snapshot["a.md"]
    assert record.custom_modified_at is None
    assert record.effective_modified_at == record.uploaded_at
