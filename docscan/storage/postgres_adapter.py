import psycopg
from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from docscan.config.settings import Settings
from docscan.storage.base import BaseKeyValueStorage
from docscan.storage.exceptions import StorageFailureError


def build_conninfo(settings: Settings) -> str:
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )


class PostgresStorageAdapter(BaseKeyValueStorage):
    """Key/value rows in a single PostgreSQL table.

    One row per key; each write is a single-statement upsert, so a value is
    replaced atomically.
    """

    def __init__(
        self,
        conninfo: str,
        table: str = "docscan_storage",
        min_size: int = 1,
        max_size: int = 5,
    ) -> None:
        self._pool = AsyncConnectionPool(
            conninfo=conninfo,
            min_size=min_size,
            max_size=max_size,
            open=False,
        )
        self._table = sql.Identifier(table)

    async def open(self) -> None:
        """Open the pool and create the table if it does not exist."""
        try:
            await self._pool.open(wait=True)
            async with self._pool.connection() as conn:
                await conn.execute(
                    sql.SQL(
                        """
                        CREATE TABLE IF NOT EXISTS {} (
                            key TEXT PRIMARY KEY,
                            value TEXT NOT NULL,
                            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                        )
                        """
                    ).format(self._table)
                )
        except (psycopg.Error, OSError) as exc:
            raise StorageFailureError(f"Cannot open postgres storage: {exc}") from exc

    async def close(self) -> None:
        await self._pool.close()

    async def get_item(self, key: str) -> str | None:
        try:
            async with self._pool.connection() as conn:
                cur = await conn.execute(
                    sql.SQL("SELECT value FROM {} WHERE key = %s").format(self._table),
                    (key,),
                )
                row = await cur.fetchone()
        except psycopg.Error as exc:
            raise StorageFailureError(f"Failed to read key {key!r}: {exc}") from exc
        if row is None:
            return None
        return row[0]

    async def set_item(self, key: str, value: str) -> None:
        try:
            async with self._pool.connection() as conn:
                await conn.execute(
                    sql.SQL(
                        """
                        INSERT INTO {} (key, value, updated_at)
                        VALUES (%s, %s, NOW())
                        ON CONFLICT (key)
                        DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
                        """
                    ).format(self._table),
                    (key, value),
                )
        except psycopg.Error as exc:
            raise StorageFailureError(f"Failed to write key {key!r}: {exc}") from exc

    async def remove_item(self, key: str) -> None:
        try:
            async with self._pool.connection() as conn:
                await conn.execute(
                    sql.SQL("DELETE FROM {} WHERE key = %s").format(self._table),
                    (key,),
                )
        except psycopg.Error as exc:
            raise StorageFailureError(f"Failed to remove key {key!r}: {exc}") from exc
