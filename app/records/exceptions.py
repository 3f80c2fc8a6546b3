class RecordError(Exception):
    """Base exception for all sealed-record errors."""


class RecordNotFoundError(RecordError):
    """Raised when a record cannot be found in the database."""


class UnknownSealedColumnError(RecordError):
    """Raised when a table/column pair is not a known encrypted column."""


class DataIntegrityError(RecordError):
    """Raised when a stored envelope cannot be decrypted or decoded.

    Aborts retrieval of that single record. Never retried automatically.
    """
