class UploadError(Exception):
    """Base exception for upload-boundary validation errors."""


class UnsupportedTypeError(UploadError):
    """Raised when the declared or sniffed type is not in the allow-list."""


class UploadTooLargeError(UploadError):
    """Raised when an upload exceeds the configured size limit."""
