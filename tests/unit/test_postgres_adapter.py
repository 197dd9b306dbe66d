from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock, patch

import psycopg
import pytest

from docscan.storage.exceptions import StorageFailureError
from docscan.storage.postgres_adapter import PostgresStorageAdapter


def _make_adapter(conn: MagicMock) -> tuple[PostgresStorageAdapter, MagicMock]:
    """Create an adapter whose pool hands out ``conn``."""
    pool = MagicMock()
    pool.open = AsyncMock()
    pool.close = AsyncMock()

    @asynccontextmanager
    async def connection() -> AsyncIterator[MagicMock]:
        yield conn

    pool.connection = connection
    with patch("docscan.storage.postgres_adapter.AsyncConnectionPool", return_value=pool):
        adapter = PostgresStorageAdapter("host=db", table="kv")
    return adapter, pool


def _make_conn(row: tuple[str] | None = None) -> MagicMock:
    cursor = MagicMock()
    cursor.fetchone = AsyncMock(return_value=row)
    conn = MagicMock()
    conn.execute = AsyncMock(return_value=cursor)
    return conn


class TestPostgresStorageAdapter:
    @pytest.mark.asyncio
    async def test_open_creates_table(self) -> None:
        conn = _make_conn()
        adapter, pool = _make_adapter(conn)
        await adapter.open()
        pool.open.assert_awaited_once()
        conn.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_item_returns_value(self) -> None:
        adapter, _pool = _make_adapter(_make_conn(("[]",)))
        assert await adapter.get_item("@documents") == "[]"

    @pytest.mark.asyncio
    async def test_get_item_missing_returns_none(self) -> None:
        adapter, _pool = _make_adapter(_make_conn(None))
        assert await adapter.get_item("@documents") is None

    @pytest.mark.asyncio
    async def test_set_item_passes_key_and_value(self) -> None:
        conn = _make_conn()
        adapter, _pool = _make_adapter(conn)
        await adapter.set_item("@documents", "[1]")
        params = conn.execute.call_args.args[1]
        assert params == ("@documents", "[1]")

    @pytest.mark.asyncio
    async def test_remove_item(self) -> None:
        conn = _make_conn()
        adapter, _pool = _make_adapter(conn)
        await adapter.remove_item("@documents")
        assert conn.execute.call_args.args[1] == ("@documents",)

    @pytest.mark.asyncio
    async def test_database_error_becomes_storage_failure(self) -> None:
        conn = _make_conn()
        conn.execute.side_effect = psycopg.OperationalError("connection lost")
        adapter, _pool = _make_adapter(conn)
        with pytest.raises(StorageFailureError, match="connection lost"):
            await adapter.set_item("@documents", "[]")

    @pytest.mark.asyncio
    async def test_close_closes_pool(self) -> None:
        adapter, pool = _make_adapter(_make_conn())
        await adapter.close()
        pool.close.assert_awaited_once()
