from docscan.config.settings import Settings
from docscan.storage.base import BaseKeyValueStorage
from docscan.storage.file_adapter import FileStorageAdapter
from docscan.storage.memory_adapter import MemoryStorageAdapter
from docscan.storage.postgres_adapter import PostgresStorageAdapter, build_conninfo


class StorageFactory:
    """Creates the configured storage adapter."""

    BACKENDS: tuple[str, ...] = ("file", "memory", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseKeyValueStorage:
        backend = settings.storage_backend.lower()
        if backend == "file":
            return FileStorageAdapter(settings.storage_dir)
        if backend == "memory":
            return MemoryStorageAdapter()
        if backend == "postgres":
            return PostgresStorageAdapter(build_conninfo(settings), table=settings.db_table)
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
