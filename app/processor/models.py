from dataclasses import dataclass, field
from enum import Enum


class ErrorKind(str, Enum):
    """Error taxonomy surfaced to callers of the privacy core."""

    INVALID_CONTAINER = "invalid_container"
    SCRUB_FAILURE = "scrub_failure"
    UNSUPPORTED_TYPE = "unsupported_type"
    UPLOAD_TOO_LARGE = "upload_too_large"
    MALFORMED_ENVELOPE = "malformed_envelope"
    AUTHENTICATION_FAILURE = "authentication_failure"
    DESERIALIZATION_ERROR = "deserialization_error"
    IO_FAILURE = "io_failure"


@dataclass(frozen=True)
class RawUpload:
    """Upload bytes plus the client-declared MIME type. Never persisted."""

    data: bytes = field(repr=False)
    declared_mime: str


@dataclass(frozen=True)
class ScrubResult:
    """Outcome of one upload. ``storage_path`` is what the application stores (sealed)."""

    success: bool
    storage_path: str | None = None
    original_metadata_snapshot: dict[str, str] | None = None
    error: ErrorKind | None = None
    error_message: str | None = None

    @classmethod
    def failed(cls, error: ErrorKind, message: str) -> "ScrubResult":
        return cls(success=False, error=error, error_message=message)
