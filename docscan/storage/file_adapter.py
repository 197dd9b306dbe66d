import asyncio
import os
import re
import tempfile
from pathlib import Path

from docscan.storage.base import BaseKeyValueStorage
from docscan.storage.exceptions import StorageFailureError

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def key_file_path(root: Path, key: str) -> Path:
    """Build path to the file holding ``key``: {root}/{sanitized key}.json"""
    return root / f"{_UNSAFE_CHARS.sub('_', key)}.json"


class FileStorageAdapter(BaseKeyValueStorage):
    """Stores each key as one UTF-8 file under a root directory.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never observe a half-written value.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    async def open(self) -> None:
        try:
            await asyncio.to_thread(self._root.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailureError(f"Cannot create storage dir {self._root}: {exc}") from exc

    async def get_item(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key_file_path(self._root, key))

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key_file_path(self._root, key), value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key_file_path(self._root, key))

    @staticmethod
    def _read(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageFailureError(f"Failed to read {path}: {exc}") from exc

    @staticmethod
    def _write(path: Path, value: str) -> None:
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(value)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise StorageFailureError(f"Failed to write {path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageFailureError(f"Failed to remove {path}: {exc}") from exc
