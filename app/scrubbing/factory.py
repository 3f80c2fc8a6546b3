from app.config.settings import Settings
from app.scrubbing.base import BaseScrubber
from app.scrubbing.jpeg_scrubber import JpegScrubber
from app.scrubbing.models import MediaKind
from app.scrubbing.raster_scrubber import RasterScrubber
from app.scrubbing.reencoder import PillowReencoder
from app.scrubbing.video_scrubber import VideoScrubber


class ScrubberFactory:
    """Creates the scrubber for a sniffed media kind."""

    @classmethod
    def create(cls, kind: MediaKind, settings: Settings) -> BaseScrubber:
        reencoder = PillowReencoder(quality=settings.reencode_quality)
        if kind is MediaKind.JPEG:
            return JpegScrubber(reencoder)
        if kind is MediaKind.OTHER_IMAGE:
            return RasterScrubber(reencoder)
        if kind is MediaKind.VIDEO:
            return VideoScrubber()
        raise ValueError(
            f"No scrubber for media kind '{kind.value}'. "
            f"Choose from: {[k.value for k in MediaKind if k is not MediaKind.UNSUPPORTED]}"
        )
