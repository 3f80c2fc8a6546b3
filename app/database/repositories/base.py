from abc import ABC, abstractmethod

from app.database.models import StoredAsset


class BaseUserDataStore(ABC):
    """Contract for the persistence collaborator.

    The privacy core only ever sees cipher envelopes through this interface;
    it has no knowledge of SQL or schema details.
    """

    @abstractmethod
    def find_paths_for_user(self, user_id: int) -> list[StoredAsset]:
        """Return every sealed storage path owned by the user."""

    @abstractmethod
    def delete_all_for_user(self, user_id: int) -> int:
        """Remove the user and all related rows. Returns the number of rows deleted."""

    @abstractmethod
    def read_encrypted_field(self, table: str, record_id: int, column: str) -> str | None:
        """Read one sealed column value.

        Raises:
            RecordNotFoundError: if no row with this ID exists.
            UnknownSealedColumnError: if table/column is not an encrypted column.
        """

    @abstractmethod
    def write_encrypted_field(
        self, table: str, record_id: int, column: str, envelope: str | None
    ) -> None:
        """Overwrite one sealed column value.

        Raises:
            RecordNotFoundError: if no row with this ID exists.
            UnknownSealedColumnError: if table/column is not an encrypted column.
        """

    @abstractmethod
    def insert_post(
        self,
        user_id: int,
        encrypted_title: str,
        encrypted_description: str | None,
        encrypted_file_path: str | None,
    ) -> int:
        """Insert a post with already-sealed fields. Returns the new post ID."""

    @abstractmethod
    def upsert_platform_connection(
        self, user_id: int, platform_name: str, encrypted_credentials: str
    ) -> int:
        """Insert or replace a platform connection. Returns its ID."""
