"""Magic-number checks so the declared MIME type is never trusted on its own."""

from __future__ import annotations

from typing import ClassVar

from app.scrubbing.models import UNSUPPORTED_FORMAT, DetectedFormat, MediaKind


def _has(data: bytes, offset: int, token: bytes) -> bool:
    return data[offset:offset + len(token)] == token


def _is_jpeg(data: bytes) -> bool:
    return data.startswith(b"\xFF\xD8\xFF")


def _is_png(data: bytes) -> bool:
    return data.startswith(b"\x89PNG\r\n\x1a\n")


def _is_gif(data: bytes) -> bool:
    return data.startswith(b"GIF87a") or data.startswith(b"GIF89a")


def _is_webp(data: bytes) -> bool:
    return len(data) >= 12 and _has(data, 0, b"RIFF") and _has(data, 8, b"WEBP")


def _is_iso_bmff(data: bytes) -> bool:
    return len(data) >= 12 and _has(data, 4, b"ftyp")


def _is_quicktime(data: bytes) -> bool:
    return _is_iso_bmff(data) and _has(data, 8, b"qt  ")


class FormatDetector:
    """Classifies upload bytes as JPEG, another raster image, video or unsupported."""

    ALLOWED_MIME_TYPES: ClassVar[frozenset[str]] = frozenset(
        {
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/webp",
            "video/mp4",
            "video/quicktime",
        }
    )

    # Declared types that share one sniffable container.
    _EQUIVALENT: ClassVar[tuple[frozenset[str], ...]] = (
        frozenset({"video/mp4", "video/quicktime"}),
    )

    def is_allowed(self, declared_mime: str) -> bool:
        return self._normalize(declared_mime) in self.ALLOWED_MIME_TYPES

    def sniff(self, data: bytes) -> DetectedFormat:
        """Classify *data* by signature alone."""
        if _is_jpeg(data):
            return DetectedFormat(MediaKind.JPEG, "image/jpeg", ".jpg")
        if _is_png(data):
            return DetectedFormat(MediaKind.OTHER_IMAGE, "image/png", ".png")
        if _is_gif(data):
            return DetectedFormat(MediaKind.OTHER_IMAGE, "image/gif", ".gif")
        if _is_webp(data):
            return DetectedFormat(MediaKind.OTHER_IMAGE, "image/webp", ".webp")
        if _is_quicktime(data):
            return DetectedFormat(MediaKind.VIDEO, "video/quicktime", ".mov")
        if _is_iso_bmff(data):
            return DetectedFormat(MediaKind.VIDEO, "video/mp4", ".mp4")
        return UNSUPPORTED_FORMAT

    def detect(self, data: bytes, declared_mime: str) -> DetectedFormat:
        """Classify *data*, treating a declared/sniffed mismatch as unsupported."""
        declared = self._normalize(declared_mime)
        if declared not in self.ALLOWED_MIME_TYPES:
            return UNSUPPORTED_FORMAT
        detected = self.sniff(data)
        if detected.mime is None or not self._equivalent(declared, detected.mime):
            return UNSUPPORTED_FORMAT
        return detected

    def _equivalent(self, declared: str, sniffed: str) -> bool:
        if declared == sniffed:
            return True
        return any(declared in family and sniffed in family for family in self._EQUIVALENT)

    @staticmethod
    def _normalize(mime: str) -> str:
        # "image/jpeg; charset=binary" -> "image/jpeg"
        return (mime or "").split(";", 1)[0].strip().lower()
