from typing import Any

from app.crypto.exceptions import EncryptionError
from app.crypto.field_cipher import FieldEncryptionService
from app.database.repositories.base import BaseUserDataStore
from app.logging.logger import Log
from app.records.exceptions import DataIntegrityError, RecordNotFoundError
from app.records.models import PostContent

POSTS = "posts"
PLATFORM_CONNECTIONS = "platform_connections"


class SealedRecordService:
    """Encrypts sensitive fields before persistence and decrypts them on read.

    A field that fails to decrypt aborts only that record's retrieval with
    DataIntegrityError; it is never retried and never replaced by a default.
    """

    def __init__(self, cipher: FieldEncryptionService, user_data: BaseUserDataStore) -> None:
        self._cipher = cipher
        self._user_data = user_data

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def create_post(
        self,
        user_id: int,
        title: str,
        description: str | None = None,
        storage_path: str | None = None,
    ) -> int:
        """Seal title, description and storage path, then insert the post."""
        post_id = self._user_data.insert_post(
            user_id,
            encrypted_title=self._cipher.encrypt_field(title),
            encrypted_description=self._seal_optional(description),
            encrypted_file_path=self._seal_optional(storage_path),
        )
        Log.info(f"Created sealed post {post_id} for user {user_id}")
        return post_id

    def load_post(self, post_id: int) -> PostContent:
        title = self.read_field(POSTS, post_id, "encrypted_title")
        if title is None:
            raise DataIntegrityError(f"posts record {post_id} has no title")
        return PostContent(
            id=post_id,
            title=title,
            description=self.read_field(POSTS, post_id, "encrypted_description"),
            storage_path=self.read_field(POSTS, post_id, "encrypted_file_path"),
        )

    # ------------------------------------------------------------------
    # Platform credentials
    # ------------------------------------------------------------------

    def save_platform_credentials(
        self, user_id: int, platform_name: str, credentials: dict[str, Any]
    ) -> int:
        envelope = self._cipher.encrypt_structured(credentials)
        connection_id = self._user_data.upsert_platform_connection(
            user_id, platform_name, envelope
        )
        Log.info(f"Stored sealed {platform_name} credentials for user {user_id}")
        return connection_id

    def load_platform_credentials(self, connection_id: int) -> dict[str, Any]:
        envelope = self._user_data.read_encrypted_field(
            PLATFORM_CONNECTIONS, connection_id, "encrypted_credentials"
        )
        if envelope is None:
            raise RecordNotFoundError(
                f"platform_connections record {connection_id} has no credentials"
            )
        try:
            value = self._cipher.decrypt_structured(envelope)
        except EncryptionError as exc:
            raise self._integrity_error(
                PLATFORM_CONNECTIONS, connection_id, "encrypted_credentials", exc
            ) from exc
        if not isinstance(value, dict):
            raise DataIntegrityError(
                f"platform_connections record {connection_id} credentials are not an object"
            )
        return value

    # ------------------------------------------------------------------
    # Generic sealed columns
    # ------------------------------------------------------------------

    def write_field(
        self, table: str, record_id: int, column: str, plaintext: str | None
    ) -> None:
        self._user_data.write_encrypted_field(
            table, record_id, column, self._seal_optional(plaintext)
        )

    def read_field(self, table: str, record_id: int, column: str) -> str | None:
        envelope = self._user_data.read_encrypted_field(table, record_id, column)
        if envelope is None:
            return None
        try:
            return self._cipher.decrypt_field(envelope)
        except EncryptionError as exc:
            raise self._integrity_error(table, record_id, column, exc) from exc

    def _seal_optional(self, plaintext: str | None) -> str | None:
        if plaintext is None:
            return None
        return self._cipher.encrypt_field(plaintext)

    @staticmethod
    def _integrity_error(
        table: str, record_id: int, column: str, exc: EncryptionError
    ) -> DataIntegrityError:
        Log.error(f"{table} record {record_id} {column} failed to decrypt: {type(exc).__name__}")
        return DataIntegrityError(
            f"{table} record {record_id} could not be decrypted ({type(exc).__name__})"
        )
