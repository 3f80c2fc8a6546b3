from app.scrubbing.base import BaseScrubber
from app.scrubbing.exceptions import ScrubFailureError


class VideoScrubber(BaseScrubber):
    """Refuses video containers.

    Container-level metadata (QuickTime keys, udta/GPS atoms, XMP) is not
    stripped by this core, so a video can never be reported as clean.
    """

    def scrub(self, data: bytes) -> bytes:
        raise ScrubFailureError(
            "Video container metadata removal is not supported; upload flagged"
        )
