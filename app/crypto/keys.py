"""Process-wide key material for field encryption.

The key is derived once at startup from the configured secret with Scrypt
and a fixed salt, then handed to ``FieldEncryptionService`` explicitly.
Rotating it requires re-encrypting every stored envelope.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from app.config.settings import Settings
from app.crypto.exceptions import KeyDerivationError
from app.logging.logger import Log

KEY_SIZE = 32


@dataclass(frozen=True)
class KeyMaterial:
    """A 256-bit AES key. ``repr`` never exposes the bytes."""

    key: bytes = field(repr=False)

    SALT: ClassVar[bytes] = b"privacy-core/field-encryption/v1"
    DEVELOPMENT_SECRET: ClassVar[str] = "development-only-secret-do-not-deploy"

    def __post_init__(self) -> None:
        if len(self.key) != KEY_SIZE:
            raise KeyDerivationError(f"Key must be {KEY_SIZE} bytes, got {len(self.key)}")

    @classmethod
    def derive(cls, secret: str, n: int = 2**14, r: int = 8, p: int = 1) -> KeyMaterial:
        """Derive key material from *secret* with Scrypt and the fixed salt."""
        if not secret:
            raise KeyDerivationError("Encryption secret must not be empty")
        try:
            kdf = Scrypt(salt=cls.SALT, length=KEY_SIZE, n=n, r=r, p=p)
            return cls(key=kdf.derive(secret.encode("utf-8")))
        except KeyDerivationError:
            raise
        except Exception as exc:
            # The secret itself never goes into the message.
            raise KeyDerivationError(
                f"Scrypt key derivation failed: {type(exc).__name__}"
            ) from exc

    @classmethod
    def from_settings(cls, settings: Settings) -> KeyMaterial:
        """Derive key material from application settings.

        An empty secret is only tolerated in a development posture; Settings
        validation already rejects it everywhere else.
        """
        secret = settings.encryption_secret.get_secret_value()
        if not secret:
            if not settings.is_development:
                raise KeyDerivationError(
                    f"ENCRYPTION_SECRET is required when APP_ENV is '{settings.app_env}'"
                )
            Log.warning(
                "ENCRYPTION_SECRET is not set; using the development-only secret"
            )
            secret = cls.DEVELOPMENT_SECRET
        key = cls.derive(
            secret,
            n=settings.kdf_scrypt_n,
            r=settings.kdf_scrypt_r,
            p=settings.kdf_scrypt_p,
        )
        Log.info("Field encryption key material initialized")
        return key
