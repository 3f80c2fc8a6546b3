class StorageError(Exception):
    """Base exception for all asset-store errors."""


class IoFailureError(StorageError):
    """Raised when a filesystem operation fails."""


class InvalidStoragePathError(StorageError):
    """Raised when a storage path does not address a permanent asset by identifier."""
