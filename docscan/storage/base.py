from abc import ABC, abstractmethod


class BaseKeyValueStorage(ABC):
    """Contract for async key/value persistence adapters.

    Values are opaque text. ``set_item`` replaces the whole value atomically:
    a concurrent or later ``get_item`` sees either the old or the new value,
    never a partial one.
    """

    async def open(self) -> None:
        """Acquire resources. Default: nothing to do."""

    async def close(self) -> None:
        """Release resources. Default: nothing to do."""

    @abstractmethod
    async def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent.

        Raises:
            StorageFailureError: if the backend cannot be read.
        """

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            StorageFailureError: if the backend cannot be written.
        """

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Remove ``key``. Removing an absent key is not an error.

        Raises:
            StorageFailureError: if the backend cannot be written.
        """
