class PurgeError(Exception):
    """Base exception for all purge errors."""


class RecordPurgeError(PurgeError):
    """Raised when user rows could not be deleted.

    Only raised after the user's sessions were terminated.
    """
