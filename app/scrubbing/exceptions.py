class ScrubError(Exception):
    """Base exception for all metadata-scrubbing errors."""


class InvalidContainerError(ScrubError):
    """Raised when image bytes are corrupt, truncated or not the expected container."""


class ScrubFailureError(ScrubError):
    """Raised when metadata removal cannot be guaranteed for the buffer."""
