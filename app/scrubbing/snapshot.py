import io
from typing import ClassVar

from PIL import ExifTags, Image, UnidentifiedImageError

from app.logging.logger import Log


class MetadataSnapshot:
    """Readable view of the metadata an upload carried before scrubbing.

    Returned to the uploader for transparency; never persisted or logged.
    """

    EXIF_IFD: ClassVar[int] = 0x8769
    GPS_IFD: ClassVar[int] = 0x8825
    MAX_VALUE_LENGTH: ClassVar[int] = 200

    def capture(self, data: bytes) -> dict[str, str] | None:
        """Return tag name -> value for EXIF, GPS and PNG text, or None if none."""
        try:
            with Image.open(io.BytesIO(data)) as im:
                snapshot = self._collect(im)
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
            SyntaxError,
        ) as exc:
            Log.debug(f"No metadata snapshot available: {type(exc).__name__}")
            return None
        return snapshot or None

    def _collect(self, im: Image.Image) -> dict[str, str]:
        snapshot: dict[str, str] = {}
        exif = im.getexif()
        for tag, value in exif.items():
            if tag in (self.EXIF_IFD, self.GPS_IFD):
                continue
            snapshot[ExifTags.TAGS.get(tag, f"0x{tag:04X}")] = self._describe(value)
        for tag, value in exif.get_ifd(self.EXIF_IFD).items():
            snapshot[ExifTags.TAGS.get(tag, f"0x{tag:04X}")] = self._describe(value)
        for tag, value in exif.get_ifd(self.GPS_IFD).items():
            snapshot[ExifTags.GPSTAGS.get(tag, f"GPS0x{tag:04X}")] = self._describe(value)

        text = getattr(im, "text", None)
        if isinstance(text, dict):
            for key, value in text.items():
                snapshot[f"PNG:{key}"] = self._describe(value)
        for key in ("comment", "xmp", "icc_profile"):
            if key in im.info:
                snapshot[key] = self._describe(im.info[key])
        return snapshot

    def _describe(self, value: object) -> str:
        if isinstance(value, bytes):
            return f"<{len(value)} bytes>"
        text = str(value)
        if len(text) > self.MAX_VALUE_LENGTH:
            return text[: self.MAX_VALUE_LENGTH] + "..."
        return text
