"""Tests for the object store backends."""

import json

import pytest

from vaultsync.exceptions import InvalidKeyError, StorageError
from vaultsync.storage import FilesystemObjectStore, MemoryObjectStore
from vaultsync.storage.base import paginate_keys, validate_key
from vaultsync.storage.filesystem import META_DIR


@pytest.fixture(params=["memory", "filesystem"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryObjectStore()
    return FilesystemObjectStore(tmp_path / "objects")


class TestPagination:
    def test_pages_in_sorted_order(self):
        keys = ["c", "a", "b", "d"]
        assert paginate_keys(keys, "", None, 2) == (["a", "b"], True, "b")
        assert paginate_keys(keys, "", "b", 2) == (["c", "d"], False, None)

    def test_prefix(self):
        assert paginate_keys(["x/1", "y/1", "x/2"], "x/", None, 10) == (["x/1", "x/2"], False, None)

    def test_exact_fit_is_not_truncated(self):
        assert paginate_keys(["a", "b"], "", None, 2) == (["a", "b"], False, None)

    def test_invalid_limit(self):
        with pytest.raises(StorageError):
            paginate_keys(["a"], "", None, 0)


class TestValidateKey:
    @pytest.mark.parametrize("key", ["", "/abs.md", "a/../b.md", "a//b.md", "./a.md", "a/"])
    def test_rejects(self, key):
        with pytest.raises(InvalidKeyError):
            validate_key(key)

    def test_accepts_nested_key(self):
        assert validate_key("notes/2024/a b.md") == "notes/2024/a b.md"


class TestObjectStore:
    @pytest.mark.asyncio
    async def test_put_get(self, store):
        await store.put("notes/a.md", b"# A", content_type="text/markdown", custom_metadata={"md5": "x"})

        obj = await store.get("notes/a.md")

        assert obj.body == b"# A"
        assert obj.size == 3
        assert obj.content_type == "text/markdown"
        assert obj.custom_metadata == {"md5": "x"}
        assert obj.etag.startswith('"')

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get("missing.md") is None

    @pytest.mark.asyncio
    async def test_overwrite(self, store):
        await store.put("a.md", b"one")
        await store.put("a.md", b"two!")

        obj = await store.get("a.md")
        assert obj.body == b"two!"
        assert obj.size == 4

    @pytest.mark.asyncio
    async def test_list_pages(self, store):
        for key in ["b.md", "a.md", "dir/c.md"]:
            await store.put(key, key.encode())

        first = await store.list(limit=2)
        second = await store.list(cursor=first.cursor, limit=2)

        assert [o.key for o in first.objects] == ["a.md", "b.md"]
        assert first.truncated
        assert [o.key for o in second.objects] == ["dir/c.md"]
        assert not second.truncated
        assert all(o.body is None for o in first.objects)

    @pytest.mark.asyncio
    async def test_list_all(self, store):
        for i in range(5):
            await store.put(f"n{i}.md", b"x")

        page_limit_objects = []
        cursor = None
        while True:
            page = await store.list(cursor=cursor, limit=2)
            page_limit_objects.extend(page.objects)
            if not page.truncated:
                break
            cursor = page.cursor

        assert [o.key for o in await store.list_all()] == [o.key for o in page_limit_objects]

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, store):
        await store.put("a.md", b"x")

        await store.delete("a.md")
        await store.delete("a.md")

        assert await store.get("a.md") is None
        assert (await store.list()).objects == []

    @pytest.mark.asyncio
    async def test_rejects_traversal(self, store):
        with pytest.raises(InvalidKeyError):
            await store.put("../outside.md", b"x")


class TestFilesystemObjectStore:
    @pytest.mark.asyncio
    async def test_writes_object_and_sidecar(self, tmp_path):
        store = FilesystemObjectStore(tmp_path)

        await store.put("notes/a.md", b"hello", custom_metadata={"modified": "2024-05-01T12:00:00.000Z"})

        assert (tmp_path / "notes" / "a.md").read_bytes() == b"hello"
        meta = json.loads((tmp_path / META_DIR / "notes" / "a.md.json").read_text())
        assert meta["custom_metadata"]["modified"] == "2024-05-01T12:00:00.000Z"

    @pytest.mark.asyncio
    async def test_metadata_dir_is_not_listed_or_writable(self, tmp_path):
        store = FilesystemObjectStore(tmp_path)
        await store.put("a.md", b"x")

        assert [o.key for o in (await store.list()).objects] == ["a.md"]
        with pytest.raises(InvalidKeyError):
            await store.put(f"{META_DIR}/evil.json", b"{}")

    @pytest.mark.asyncio
    async def test_file_without_sidecar_is_listed(self, tmp_path):
        (tmp_path / "dropped.md").write_bytes(b"manual")
        store = FilesystemObjectStore(tmp_path)

        obj = await store.get("dropped.md")

        assert obj.body == b"manual"
        assert obj.size == 6
        assert obj.etag

    @pytest.mark.asyncio
    async def test_corrupt_sidecar_raises_storage_error(self, tmp_path):
        store = FilesystemObjectStore(tmp_path)
        await store.put("a.md", b"x")
        (tmp_path / META_DIR / "a.md.json").write_text("{broken")

        with pytest.raises(StorageError):
            await store.get("a.md")
