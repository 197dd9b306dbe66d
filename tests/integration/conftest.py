import os
import uuid
from collections.abc import AsyncGenerator

import psycopg
import pytest
import pytest_asyncio
from psycopg import sql

from docscan.config.settings import Settings
from docscan.storage.postgres_adapter import PostgresStorageAdapter, build_conninfo


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docscan_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest_asyncio.fixture
async def postgres_storage(
    test_settings: Settings,
) -> AsyncGenerator[PostgresStorageAdapter, None]:
    """A postgres adapter on a throwaway table, dropped afterwards."""
    conninfo = build_conninfo(test_settings)
    try:
        connection = await psycopg.AsyncConnection.connect(conninfo, connect_timeout=3)
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    await connection.close()

    table = f"docscan_test_{uuid.uuid4().hex[:8]}"
    adapter = PostgresStorageAdapter(conninfo, table=table, max_size=2)
    await adapter.open()
    try:
        yield adapter
    finally:
        await adapter.close()
        async with await psycopg.AsyncConnection.connect(conninfo, autocommit=True) as conn:
            await conn.execute(
                sql.SQL("DROP TABLE IF EXISTS {}").format(sql.Identifier(table))
            )
