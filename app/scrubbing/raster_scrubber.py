from typing import ClassVar

from app.scrubbing.base import BaseScrubber
from app.scrubbing.exceptions import InvalidContainerError, ScrubFailureError
from app.scrubbing.reencoder import PillowReencoder


class RasterScrubber(BaseScrubber):
    """Scrubs PNG/GIF/WebP by a metadata-free Pillow re-encode."""

    SUPPORTED_FORMATS: ClassVar[frozenset[str]] = frozenset({"PNG", "GIF", "WEBP"})

    def __init__(self, reencoder: PillowReencoder) -> None:
        self._reencoder = reencoder

    def scrub(self, data: bytes) -> bytes:
        image_format = self._reencoder.open_format(data)
        if image_format not in self.SUPPORTED_FORMATS:
            raise InvalidContainerError(f"Unexpected raster format '{image_format}'")

        cleaned = self._reencoder.reencode(data, image_format)
        if self._reencoder.carries_metadata(cleaned):
            raise ScrubFailureError(f"Metadata still present after {image_format} re-encode")
        return cleaned
