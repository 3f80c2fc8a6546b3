import io
import secrets

import pytest
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from app.crypto.field_cipher import FieldEncryptionService
from app.crypto.keys import KeyMaterial
from tests.helpers import XMP_HEADER, exif_bytes, insert_after_soi, make_segment


@pytest.fixture(autouse=True)
def _test_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings default to production, which requires ENCRYPTION_SECRET."""
    monkeypatch.setenv("APP_ENV", "test")


@pytest.fixture()
def plain_jpeg_bytes() -> bytes:
    """A small JPEG with only the structural APP0 (JFIF) segment."""
    buf = io.BytesIO()
    Image.new("RGB", (32, 32), color=(123, 200, 50)).save(buf, "JPEG", quality=90)
    return buf.getvalue()


@pytest.fixture()
def jpeg_with_metadata() -> bytes:
    """JPEG carrying EXIF (APP1), XMP (APP1), ICC (APP2), IPTC (APP13) and a comment."""
    buf = io.BytesIO()
    Image.new("RGB", (32, 32), color=(10, 20, 30)).save(
        buf, "JPEG", quality=90, exif=exif_bytes(), comment=b"holiday"
    )
    return insert_after_soi(
        buf.getvalue(),
        make_segment(0xE1, XMP_HEADER + b"<x:xmpmeta>creator=Alice</x:xmpmeta>"),
        make_segment(0xE2, b"ICC_PROFILE\x00\x01\x01" + b"\x00" * 16),
        make_segment(0xED, b"Photoshop 3.0\x008BIM\x04\x04\x00\x00\x00\x00\x00\x00"),
    )


@pytest.fixture()
def png_with_metadata() -> bytes:
    info = PngInfo()
    info.add_text("Author", "Alice Example")
    info.add_text("Location", "52.1,21.0")
    buf = io.BytesIO()
    Image.new("RGBA", (16, 16), color=(1, 2, 3, 255)).save(
        buf, "PNG", pnginfo=info, exif=exif_bytes()
    )
    return buf.getvalue()


@pytest.fixture()
def gif_with_comment() -> bytes:
    buf = io.BytesIO()
    Image.new("P", (16, 16), color=3).save(buf, "GIF", comment=b"shot at home")
    return buf.getvalue()


@pytest.fixture()
def animated_gif_bytes() -> bytes:
    frames = [
        Image.new("RGB", (16, 16), color=c)
        for c in ((255, 0, 0), (0, 255, 0), (0, 0, 255))
    ]
    buf = io.BytesIO()
    frames[0].save(
        buf,
        "GIF",
        save_all=True,
        append_images=frames[1:],
        duration=100,
        loop=0,
        comment=b"secret",
    )
    return buf.getvalue()


@pytest.fixture()
def webp_with_metadata() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (16, 16), color=(200, 100, 50)).save(
        buf, "WEBP", quality=90, exif=exif_bytes()
    )
    return buf.getvalue()


@pytest.fixture()
def mp4_bytes() -> bytes:
    return b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00" * 64


@pytest.fixture()
def mov_bytes() -> bytes:
    return b"\x00\x00\x00\x14ftypqt  \x00\x00\x02\x00qt  " + b"\x00" * 64


@pytest.fixture()
def key_material() -> KeyMaterial:
    return KeyMaterial(key=secrets.token_bytes(32))


@pytest.fixture()
def cipher(key_material: KeyMaterial) -> FieldEncryptionService:
    return FieldEncryptionService(key_material)
