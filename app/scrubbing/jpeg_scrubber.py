"""JPEG metadata scrubbing by marker-segment walk.

Processing flow:
1. Walk the segments after SOI (``JpegSegmentReader``).
2. Drop APPn metadata segments (EXIF, XMP, ICC, IPTC, ...), copy the rest.
   SOS and the entropy-coded data behind it are copied byte for byte.
3. Re-parse the output; if metadata is still present, the walk had to fall
   back to a raw tail, or bytes follow the primary image's EOI (MPO secondary
   frames with their own EXIF, motion-photo video trailers), re-encode through
   Pillow and verify again. The re-encode keeps the primary image only.

The original buffer is never returned as if it were clean.
"""

from __future__ import annotations

from app.logging.logger import Log
from app.scrubbing.base import BaseScrubber
from app.scrubbing.exceptions import InvalidContainerError, ScrubError, ScrubFailureError
from app.scrubbing.jpeg_segments import SOI_BYTES, JpegSegmentReader
from app.scrubbing.models import EOI, Segment
from app.scrubbing.reencoder import PillowReencoder

EOI_BYTES = bytes([0xFF, EOI])


class JpegScrubber(BaseScrubber):
    """Removes APPn metadata segments while leaving the scan data untouched."""

    def __init__(self, reencoder: PillowReencoder) -> None:
        self._reencoder = reencoder

    def scrub(self, data: bytes) -> bytes:
        try:
            cleaned = self._strip_segments(data)
        except InvalidContainerError:
            raise
        except Exception as exc:
            raise ScrubFailureError(f"JPEG segment walk failed: {exc}") from exc

        if self.is_clean(cleaned):
            return cleaned

        Log.warning("JPEG marker walk could not verify metadata removal, re-encoding")
        try:
            reencoded = self._reencoder.reencode(data, "JPEG")
        except ScrubError as exc:
            raise ScrubFailureError(f"JPEG re-encode fallback failed: {exc}") from exc

        if not self.is_clean(reencoded):
            raise ScrubFailureError("Metadata still present after JPEG re-encode")
        return reencoded

    def is_clean(self, data: bytes) -> bool:
        """True if *data* parses up to SOS with no metadata and nothing past its EOI."""
        try:
            segments = list(JpegSegmentReader(data))
        except InvalidContainerError:
            return False
        if not any(segment.is_scan for segment in segments):
            return False
        return not any(
            segment.is_metadata or segment.is_raw or self._has_trailer(segment)
            for segment in segments
        )

    @staticmethod
    def _has_trailer(segment: Segment) -> bool:
        """True if non-padding bytes follow the first EOI behind the scan header.

        Entropy-coded data never holds an unstuffed FF D9. A table segment
        between progressive scans can, and such files are re-encoded.
        """
        if not segment.is_scan:
            return False
        header_end = 2 + int.from_bytes(segment.raw[2:4], "big")
        eoi = segment.raw.find(EOI_BYTES, header_end)
        if eoi == -1:
            return False
        return bool(segment.raw[eoi + len(EOI_BYTES):].strip(b"\x00"))

    def _strip_segments(self, data: bytes) -> bytes:
        kept: list[bytes] = [SOI_BYTES]
        removed: list[str] = []
        for segment in JpegSegmentReader(data):
            if segment.is_metadata:
                removed.append(segment.name)
                continue
            kept.append(segment.raw)

        if removed:
            Log.debug(f"Removed {len(removed)} JPEG metadata segments: {', '.join(removed)}")
        return b"".join(kept)
