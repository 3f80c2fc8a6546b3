import struct
import zlib
from typing import Any

import psycopg
from PIL import Image

from app.scrubbing.jpeg_segments import JpegSegmentReader

XMP_HEADER = b"http://ns.adobe.com/xap/1.0/\x00"


def make_segment(marker: int, payload: bytes) -> bytes:
    """Build a length-prefixed marker segment."""
    return bytes([0xFF, marker]) + struct.pack(">H", len(payload) + 2) + payload


def insert_after_soi(jpeg: bytes, *segments: bytes) -> bytes:
    return jpeg[:2] + b"".join(segments) + jpeg[2:]


def scan_region(jpeg: bytes) -> bytes:
    """Bytes from the SOS marker to the end of the buffer."""
    for segment in JpegSegmentReader(jpeg):
        if segment.is_scan:
            return segment.raw
    raise AssertionError("no SOS segment")


def segment_names(jpeg: bytes) -> list[str]:
    return [segment.name for segment in JpegSegmentReader(jpeg)]


def exif_bytes(artist: str = "Alice Example") -> bytes:
    exif = Image.Exif()
    exif[0x013B] = artist  # Artist
    exif[0x010F] = "ExampleCam"  # Make
    exif[0x0132] = "2024:01:02 03:04:05"  # DateTime
    return exif.tobytes()


def count_rows(conn: psycopg.Connection[Any], table: str, user_id: int) -> int:
    column = "id" if table == "users" else "user_id"
    with conn.cursor() as cur:
        cur.execute(f"SELECT COUNT(*) FROM {table} WHERE {column} = %s", (user_id,))  # noqa: S608
        row = cur.fetchone()
    conn.commit()
    assert row is not None
    return int(row[0])


def png_with_dimensions(width: int, height: int) -> bytes:
    """A PNG whose IHDR declares *width* x *height* over a one-pixel IDAT."""

    def chunk(kind: bytes, body: bytes) -> bytes:
        crc = zlib.crc32(kind + body)
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", ihdr)
        + chunk(b"IDAT", zlib.compress(b"\x00\x00\x00\x00"))
        + chunk(b"IEND", b"")
    )
