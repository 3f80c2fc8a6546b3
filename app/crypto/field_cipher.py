"""Authenticated field encryption (AES-256-GCM).

Every call to ``encrypt_field`` draws a fresh 16-byte IV from ``secrets``;
decryption fails closed: a malformed envelope or a tag that does not verify
raises, and no partial or unauthenticated plaintext is ever returned.
"""

from __future__ import annotations

import json
import secrets
from collections.abc import Callable
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.crypto.envelope import IV_SIZE, TAG_SIZE, CipherEnvelope
from app.crypto.exceptions import (
    AuthenticationFailureError,
    DeserializationError,
    SerializationError,
)
from app.crypto.keys import KeyMaterial


class FieldEncryptionService:
    """Encrypts and decrypts text and JSON values with a process-wide key."""

    def __init__(
        self,
        key: KeyMaterial,
        iv_source: Callable[[int], bytes] = secrets.token_bytes,
    ) -> None:
        self._aesgcm = AESGCM(key.key)
        self._iv_source = iv_source

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key=<redacted>)"

    # ------------------------------------------------------------------
    # Text fields
    # ------------------------------------------------------------------

    def encrypt_field(self, plaintext: str) -> str:
        """Encrypt *plaintext* and return the serialized envelope."""
        return self._seal(plaintext.encode("utf-8")).serialize()

    def decrypt_field(self, envelope: str) -> str:
        """Decrypt a serialized envelope back to text.

        Raises:
            MalformedEnvelopeError: if a segment is missing or not valid hex.
            AuthenticationFailureError: if the tag does not verify.
            DeserializationError: if the authenticated bytes are not UTF-8.
        """
        data = self._open(CipherEnvelope.parse(envelope))
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DeserializationError("Decrypted field is not valid UTF-8") from exc

    # ------------------------------------------------------------------
    # Structured (JSON) values
    # ------------------------------------------------------------------

    def encrypt_structured(self, value: Any) -> str:
        """Encrypt the canonical JSON serialization of *value*."""
        try:
            canonical = json.dumps(
                value, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            )
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                f"Value of type {type(value).__name__} is not JSON serializable"
            ) from exc
        return self.encrypt_field(canonical)

    def decrypt_structured(self, envelope: str) -> Any:
        """Decrypt an envelope produced by ``encrypt_structured``.

        Raises:
            DeserializationError: if decryption succeeds but the text is not JSON.
        """
        text = self.decrypt_field(envelope)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise DeserializationError(
                f"Decrypted value is not valid JSON (line {exc.lineno}, column {exc.colno})"
            ) from exc

    # ------------------------------------------------------------------
    # GCM primitives
    # ------------------------------------------------------------------

    def _seal(self, data: bytes) -> CipherEnvelope:
        iv = self._iv_source(IV_SIZE)
        sealed = self._aesgcm.encrypt(iv, data, None)
        return CipherEnvelope(
            iv=iv,
            auth_tag=sealed[-TAG_SIZE:],
            ciphertext=sealed[:-TAG_SIZE],
        )

    def _open(self, envelope: CipherEnvelope) -> bytes:
        try:
            return self._aesgcm.decrypt(
                envelope.iv, envelope.ciphertext + envelope.auth_tag, None
            )
        except InvalidTag as exc:
            raise AuthenticationFailureError(
                "Authentication tag did not verify"
            ) from exc
