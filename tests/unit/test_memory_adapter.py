import pytest

from docscan.storage.memory_adapter import MemoryStorageAdapter


class TestMemoryStorageAdapter:
    @pytest.mark.asyncio
    async def test_missing_key_returns_none(self) -> None:
        assert await MemoryStorageAdapter().get_item("k") is None

    @pytest.mark.asyncio
    async def test_initial_values(self) -> None:
        adapter = MemoryStorageAdapter({"k": "v"})
        assert await adapter.get_item("k") == "v"

    @pytest.mark.asyncio
    async def test_initial_dict_is_copied(self) -> None:
        initial = {"k": "v"}
        adapter = MemoryStorageAdapter(initial)
        await adapter.set_item("k", "changed")
        assert initial == {"k": "v"}

    @pytest.mark.asyncio
    async def test_set_remove(self) -> None:
        adapter = MemoryStorageAdapter()
        await adapter.set_item("k", "v")
        await adapter.remove_item("k")
        await adapter.remove_item("k")
        assert await adapter.get_item("k") is None

    @pytest.mark.asyncio
    async def test_open_close_are_noops(self) -> None:
        adapter = MemoryStorageAdapter({"k": "v"})
        await adapter.open()
        await adapter.close()
        assert await adapter.get_item("k") == "v"
