"""Iterator over JPEG marker segments.

All bounds checking for the marker walk lives here so that the scrubber's
keep/drop decision is one branch per ``Segment``.
"""

from __future__ import annotations

from collections.abc import Iterator

from app.scrubbing.exceptions import InvalidContainerError
from app.scrubbing.models import EOI, SOI, SOS, TEM, Segment

SOI_BYTES = b"\xFF\xD8"

# Markers without a length field.
_STANDALONE = frozenset({SOI, EOI, TEM, *range(0xD0, 0xD8)})


class JpegSegmentReader:
    """Walks the segments that follow SOI.

    The entropy-coded data after SOS may contain byte pairs that look like
    markers, so SOS and everything after it is returned as one segment.
    """

    def __init__(self, data: bytes) -> None:
        if not data.startswith(SOI_BYTES):
            raise InvalidContainerError("Missing JPEG start-of-image marker")
        self._data = data
        self._pos = len(SOI_BYTES)
        self._done = False
        self._after_eoi = False

    def __iter__(self) -> Iterator[Segment]:
        while (segment := self.next_segment()) is not None:
            yield segment

    def next_segment(self) -> Segment | None:
        """Return the next segment, or None once the stream is exhausted.

        Raises:
            InvalidContainerError: on a truncated stream or an invalid length field.
        """
        if self._done:
            return None

        data = self._data
        pos = self._pos

        if self._after_eoi:
            if pos >= len(data):
                self._done = True
                return None
            return self._raw_tail(pos)

        if pos >= len(data):
            raise InvalidContainerError("Truncated JPEG: stream ended before start-of-scan")

        if data[pos] != 0xFF:
            return self._raw_tail(pos)

        # 0xFF fill bytes may precede a marker.
        while pos + 1 < len(data) and data[pos + 1] == 0xFF:
            pos += 1
        if pos + 1 >= len(data):
            raise InvalidContainerError(f"Truncated JPEG marker at offset {pos}")

        marker = data[pos + 1]
        if marker == 0x00:
            # Byte stuffing only exists inside entropy-coded data.
            return self._raw_tail(self._pos)

        if marker == SOS:
            self._done = True
            return Segment(marker=marker, offset=pos, raw=data[pos:])

        if marker in _STANDALONE:
            self._pos = pos + 2
            if marker == EOI:
                self._after_eoi = True
            return Segment(marker=marker, offset=pos, raw=data[pos:pos + 2])

        if pos + 4 > len(data):
            raise InvalidContainerError(
                f"Truncated JPEG: missing length field for marker 0x{marker:02X} at offset {pos}"
            )
        length = int.from_bytes(data[pos + 2:pos + 4], "big")
        if length < 2:
            raise InvalidContainerError(
                f"Invalid segment length {length} for marker 0x{marker:02X} at offset {pos}"
            )
        end = pos + 2 + length
        if end > len(data):
            raise InvalidContainerError(
                f"Truncated JPEG: segment 0x{marker:02X} at offset {pos} "
                f"needs {length} bytes, {len(data) - pos - 2} available"
            )
        self._pos = end
        return Segment(marker=marker, offset=pos, raw=data[pos:end])

    def _raw_tail(self, pos: int) -> Segment:
        self._done = True
        return Segment(marker=None, offset=pos, raw=self._data[pos:])
