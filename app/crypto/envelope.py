from __future__ import annotations

import re
from dataclasses import dataclass

from app.crypto.exceptions import MalformedEnvelopeError

IV_SIZE = 16
TAG_SIZE = 16
SEPARATOR = ":"

_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")


@dataclass(frozen=True)
class CipherEnvelope:
    """IV, GCM tag and ciphertext, stored as ``hex(iv):hex(tag):hex(ciphertext)``."""

    iv: bytes
    auth_tag: bytes
    ciphertext: bytes

    def serialize(self) -> str:
        return SEPARATOR.join(
            (self.iv.hex(), self.auth_tag.hex(), self.ciphertext.hex())
        )

    @classmethod
    def parse(cls, text: str) -> CipherEnvelope:
        """Parse the colon-joined wire format.

        The ciphertext segment may be empty (empty plaintext); IV and tag
        must be present and exactly 16 bytes each.

        Raises:
            MalformedEnvelopeError: on a missing/extra segment or invalid hex.
        """
        if not isinstance(text, str):
            raise MalformedEnvelopeError("Envelope must be text")
        parts = text.split(SEPARATOR)
        if len(parts) != 3:
            raise MalformedEnvelopeError(
                f"Envelope must have 3 segments, got {len(parts)}"
            )
        iv = cls._decode_segment("iv", parts[0])
        auth_tag = cls._decode_segment("auth tag", parts[1])
        ciphertext = cls._decode_segment("ciphertext", parts[2])
        if len(iv) != IV_SIZE:
            raise MalformedEnvelopeError(f"iv must be {IV_SIZE} bytes, got {len(iv)}")
        if len(auth_tag) != TAG_SIZE:
            raise MalformedEnvelopeError(
                f"auth tag must be {TAG_SIZE} bytes, got {len(auth_tag)}"
            )
        return cls(iv=iv, auth_tag=auth_tag, ciphertext=ciphertext)

    @staticmethod
    def _decode_segment(name: str, segment: str) -> bytes:
        # bytes.fromhex tolerates whitespace; the wire format does not.
        if _HEX_RE.fullmatch(segment) is None:
            raise MalformedEnvelopeError(f"{name} segment is not valid hex")
        return bytes.fromhex(segment)
