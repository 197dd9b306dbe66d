from pathlib import Path
from unittest.mock import patch

import pytest

from docscan.storage.exceptions import StorageFailureError
from docscan.storage.file_adapter import FileStorageAdapter, key_file_path


class TestKeyFilePath:
    def test_sanitizes_key(self, tmp_path: Path) -> None:
        assert key_file_path(tmp_path, "@documents") == tmp_path / "_documents.json"

    def test_keeps_safe_characters(self, tmp_path: Path) -> None:
        assert key_file_path(tmp_path, "docs-v1.backup") == tmp_path / "docs-v1.backup.json"

    def test_cannot_escape_root(self, tmp_path: Path) -> None:
        assert key_file_path(tmp_path, "../../etc/passwd").parent == tmp_path


class TestFileStorageAdapter:
    @pytest.mark.asyncio
    async def test_open_creates_root(self, tmp_path: Path) -> None:
        root = tmp_path / "nested" / "data"
        adapter = FileStorageAdapter(root)
        await adapter.open()
        assert root.is_dir()

    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self, tmp_path: Path) -> None:
        adapter = FileStorageAdapter(tmp_path)
        assert await adapter.get_item("@documents") is None

    @pytest.mark.asyncio
    async def test_set_then_get(self, tmp_path: Path) -> None:
        adapter = FileStorageAdapter(tmp_path)
        await adapter.set_item("@documents", '[{"name": "Grüße"}]')
        assert await adapter.get_item("@documents") == '[{"name": "Grüße"}]'

    @pytest.mark.asyncio
    async def test_set_replaces_value(self, tmp_path: Path) -> None:
        adapter = FileStorageAdapter(tmp_path)
        await adapter.set_item("k", "first")
        await adapter.set_item("k", "second")
        assert await adapter.get_item("k") == "second"

    @pytest.mark.asyncio
    async def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        adapter = FileStorageAdapter(tmp_path)
        await adapter.set_item("k", "value")
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    @pytest.mark.asyncio
    async def test_remove(self, tmp_path: Path) -> None:
        adapter = FileStorageAdapter(tmp_path)
        await adapter.set_item("k", "value")
        await adapter.remove_item("k")
        assert await adapter.get_item("k") is None

    @pytest.mark.asyncio
    async def test_remove_missing_is_not_error(self, tmp_path: Path) -> None:
        adapter = FileStorageAdapter(tmp_path)
        await adapter.remove_item("never-written")

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_value(self, tmp_path: Path) -> None:
        adapter = FileStorageAdapter(tmp_path)
        await adapter.set_item("k", "old")
        with patch("docscan.storage.file_adapter.os.replace", side_effect=OSError("full")):
            with pytest.raises(StorageFailureError, match="full"):
                await adapter.set_item("k", "new")
        assert await adapter.get_item("k") == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    @pytest.mark.asyncio
    async def test_unreadable_file_raises(self, tmp_path: Path) -> None:
        (tmp_path / "k.json").write_bytes(b"\xff\xfe\x00")
        adapter = FileStorageAdapter(tmp_path)
        with pytest.raises(StorageFailureError):
            await adapter.get_item("k")

    @pytest.mark.asyncio
    async def test_key_that_is_a_directory_raises(self, tmp_path: Path) -> None:
        (tmp_path / "k.json").mkdir()
        adapter = FileStorageAdapter(tmp_path)
        with pytest.raises(StorageFailureError):
            await adapter.get_item("k")
