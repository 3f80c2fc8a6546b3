from dataclasses import dataclass
from enum import Enum

SOI = 0xD8
EOI = 0xD9
SOS = 0xDA
TEM = 0x01
APP0 = 0xE0
APP1 = 0xE1
APP13 = 0xED
APP14 = 0xEE
APP15 = 0xEF
COM = 0xFE


class MediaKind(str, Enum):
    """Classification of uploaded bytes by magic-byte inspection."""

    JPEG = "jpeg"
    OTHER_IMAGE = "other_image"
    VIDEO = "video"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class DetectedFormat:
    """Sniffed format. ``extension`` always comes from the signature, never the client."""

    kind: MediaKind
    mime: str | None = None
    extension: str | None = None


UNSUPPORTED_FORMAT = DetectedFormat(kind=MediaKind.UNSUPPORTED)


@dataclass(frozen=True)
class Segment:
    """One JPEG marker segment as it appears in the buffer.

    ``raw`` holds the full bytes (marker, length field and payload). For SOS
    it holds the rest of the buffer. ``marker`` is None for a raw tail that
    could not be parsed as markers.
    """

    marker: int | None
    offset: int
    raw: bytes

    @property
    def payload(self) -> bytes:
        if self.marker is None or len(self.raw) < 4:
            return b""
        return self.raw[4:]

    @property
    def is_scan(self) -> bool:
        return self.marker == SOS

    @property
    def is_raw(self) -> bool:
        return self.marker is None

    @property
    def is_metadata(self) -> bool:
        """True for APP1-APP15 (EXIF, XMP, ICC, IPTC, ...).

        APP0 (JFIF) is structural; APP14 "Adobe" only carries the colour
        transform flag that decoders need for CMYK/YCCK data.
        """
        if self.marker is None or not APP1 <= self.marker <= APP15:
            return False
        if self.marker == APP14 and self.payload.startswith(b"Adobe"):
            return False
        return True

    @property
    def name(self) -> str:
        if self.marker is None:
            return "RAW"
        if APP0 <= self.marker <= APP15:
            return f"APP{self.marker - APP0}"
        return {SOI: "SOI", EOI: "EOI", SOS: "SOS", COM: "COM"}.get(
            self.marker, f"0x{self.marker:02X}"
        )
