class EncryptionError(Exception):
    """Base exception for all field-encryption errors.

    Messages never carry key material, plaintext or ciphertext.
    """


class KeyDerivationError(EncryptionError):
    """Raised when key material cannot be derived from the configured secret."""


class MalformedEnvelopeError(EncryptionError):
    """Raised when an envelope is missing a segment or a segment is not valid hex."""


class AuthenticationFailureError(EncryptionError):
    """Raised when the GCM tag does not verify (tampering, corruption or wrong key)."""


class SerializationError(EncryptionError):
    """Raised when a structured value cannot be serialized to canonical JSON."""


class DeserializationError(EncryptionError):
    """Raised when authenticated plaintext cannot be decoded back into a value."""
