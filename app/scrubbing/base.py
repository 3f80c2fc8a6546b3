from abc import ABC, abstractmethod


class BaseScrubber(ABC):
    """Contract for all metadata scrubbing adapters."""

    @abstractmethod
    def scrub(self, data: bytes) -> bytes:
        """Return *data* with all metadata removed.

        Args:
            data: Raw upload bytes already classified by the FormatDetector.

        Returns:
            The scrubbed buffer. Never the original buffer unless it was
            verified to carry no metadata.

        Raises:
            InvalidContainerError: if the bytes are corrupt or truncated.
            ScrubFailureError: if metadata removal cannot be guaranteed.
        """
