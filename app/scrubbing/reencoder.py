"""Metadata-free re-encoding through Pillow.

Used directly for PNG/GIF/WebP, whose metadata lives in text chunks, ICC
profiles and extension blocks, and as the stronger fallback for JPEGs whose
marker walk could not be verified.
"""

from __future__ import annotations

import io
from typing import Any, ClassVar

from PIL import Image, ImageOps, ImageSequence, UnidentifiedImageError

from app.scrubbing.exceptions import InvalidContainerError, ScrubFailureError

# DecompressionBombError is raised by Image.open for oversized headers and is not an OSError.
_UNREADABLE = (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError)


class PillowReencoder:
    """Decodes an image and writes its pixels back without ancillary metadata."""

    # Structural info keys needed to reproduce the image faithfully.
    KEEP_INFO_KEYS: ClassVar[frozenset[str]] = frozenset(
        {"transparency", "duration", "loop", "background"}
    )
    METADATA_INFO_KEYS: ClassVar[frozenset[str]] = frozenset(
        {"exif", "icc_profile", "xmp", "XML:com.adobe.xmp", "comment", "extension"}
    )

    def __init__(self, quality: int = 95) -> None:
        self._quality = quality

    def open_format(self, data: bytes) -> str:
        """Return Pillow's format name for *data* (e.g. "PNG").

        Raises:
            InvalidContainerError: if Pillow cannot identify the image or its
                declared size exceeds the decompression bomb limit.
        """
        try:
            with Image.open(io.BytesIO(data)) as im:
                return str(im.format)
        except _UNREADABLE as exc:
            raise InvalidContainerError(f"Unreadable image data: {exc}") from exc

    def reencode(self, data: bytes, image_format: str) -> bytes:
        """Decode *data* and save it as *image_format* with metadata dropped.

        Raises:
            InvalidContainerError: if the image cannot be decoded.
            ScrubFailureError: if the clean image cannot be written.
        """
        try:
            with Image.open(io.BytesIO(data)) as im:
                # JPEG output keeps the primary image only; MPO frames carry their own EXIF.
                if image_format.upper() != "JPEG" and getattr(im, "n_frames", 1) > 1:
                    frames = [
                        self._clean_frame(frame) for frame in ImageSequence.Iterator(im)
                    ]
                else:
                    # Bake the orientation into the pixels before the tag is dropped.
                    frames = [self._clean_frame(ImageOps.exif_transpose(im))]
        except _UNREADABLE as exc:
            raise InvalidContainerError(f"Unreadable image data: {exc}") from exc

        first, rest = frames[0], frames[1:]
        save_kwargs = self._save_kwargs(image_format, first)
        if rest:
            save_kwargs.update(save_all=True, append_images=rest)

        out = io.BytesIO()
        try:
            first.save(out, format=image_format, **save_kwargs)
        except (OSError, ValueError, KeyError) as exc:
            raise ScrubFailureError(f"{image_format} re-encode failed: {exc}") from exc
        return out.getvalue()

    def carries_metadata(self, data: bytes) -> bool:
        """True if the decoded image still exposes metadata info keys or PNG text."""
        try:
            with Image.open(io.BytesIO(data)) as im:
                if self.METADATA_INFO_KEYS & set(im.info):
                    return True
                text = getattr(im, "text", None)
                return bool(text)
        except _UNREADABLE as exc:
            raise ScrubFailureError(f"Re-encoded image could not be verified: {exc}") from exc

    def _clean_frame(self, frame: Image.Image) -> Image.Image:
        clean = frame.copy()
        clean.info = {
            key: value for key, value in frame.info.items() if key in self.KEEP_INFO_KEYS
        }
        return clean

    def _save_kwargs(self, image_format: str, first: Image.Image) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        fmt = image_format.upper()
        if fmt in ("JPEG", "WEBP"):
            kwargs["quality"] = self._quality
            kwargs["exif"] = b""
        # Animation settings are read from encoderinfo, not from frame info.
        if fmt in ("GIF", "WEBP"):
            for key in ("duration", "loop"):
                if key in first.info:
                    kwargs[key] = first.info[key]
        return kwargs
