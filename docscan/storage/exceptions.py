class StorageFailureError(Exception):
    """Raised when the persistence layer cannot complete a read or write."""
