from typing import ClassVar

from psycopg import sql
from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.models import StoredAsset
from app.database.repositories.base import BaseUserDataStore
from app.records.exceptions import RecordNotFoundError, UnknownSealedColumnError


class UserDataRepository(BaseUserDataStore):
    """Database operations for user-owned rows and their sealed columns."""

    SEALED_COLUMNS: ClassVar[dict[str, frozenset[str]]] = {
        "posts": frozenset(
            {"encrypted_title", "encrypted_description", "encrypted_file_path"}
        ),
        "platform_connections": frozenset({"encrypted_credentials"}),
    }

    # Children first so the purge does not depend on ON DELETE CASCADE alone.
    _PURGE_STATEMENTS: ClassVar[tuple[str, ...]] = (
        "DELETE FROM sessions WHERE user_id = %s",
        "DELETE FROM platform_connections WHERE user_id = %s",
        "DELETE FROM posts WHERE user_id = %s",
        "DELETE FROM users WHERE id = %s",
    )

    def find_paths_for_user(self, user_id: int) -> list[StoredAsset]:
        """Fetch sealed file paths of every post owned by the user."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, encrypted_file_path
                    FROM posts
                    WHERE user_id = %s
                      AND encrypted_file_path IS NOT NULL
                    ORDER BY id
                    """,
                    (user_id,),
                )
                rows = cur.fetchall()

        return [
            StoredAsset(record_id=row["id"], sealed_path=row["encrypted_file_path"])
            for row in rows
        ]

    def delete_all_for_user(self, user_id: int) -> int:
        """Delete the user and every related row in a single transaction."""
        deleted = 0
        with get_connection() as conn:
            with conn.cursor() as cur:
                for statement in self._PURGE_STATEMENTS:
                    cur.execute(statement, (user_id,))
                    deleted += max(cur.rowcount, 0)
            conn.commit()
        return deleted

    def read_encrypted_field(self, table: str, record_id: int, column: str) -> str | None:
        self._check_sealed_column(table, column)
        query = sql.SQL("SELECT {column} FROM {table} WHERE id = %s").format(
            column=sql.Identifier(column),
            table=sql.Identifier(table),
        )
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (record_id,))
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError(f"{table} record {record_id} not found")
        value: str | None = row[0]
        return value

    def write_encrypted_field(
        self, table: str, record_id: int, column: str, envelope: str | None
    ) -> None:
        self._check_sealed_column(table, column)
        query = sql.SQL("UPDATE {table} SET {column} = %s WHERE id = %s").format(
            table=sql.Identifier(table),
            column=sql.Identifier(column),
        )
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (envelope, record_id))
                if cur.rowcount == 0:
                    raise RecordNotFoundError(f"{table} record {record_id} not found")
            conn.commit()

    def insert_post(
        self,
        user_id: int,
        encrypted_title: str,
        encrypted_description: str | None,
        encrypted_file_path: str | None,
    ) -> int:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO posts
                    (user_id, encrypted_title, encrypted_description, encrypted_file_path)
                    VALUES (%s, %s, %s, %s)
                    RETURNING id
                    """,
                    (user_id, encrypted_title, encrypted_description, encrypted_file_path),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RecordNotFoundError(f"Insert into posts for user {user_id} returned no row")
        return int(row[0])

    def upsert_platform_connection(
        self, user_id: int, platform_name: str, encrypted_credentials: str
    ) -> int:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO platform_connections
                    (user_id, platform_name, encrypted_credentials)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (user_id, platform_name)
                    DO UPDATE SET encrypted_credentials = EXCLUDED.encrypted_credentials,
                                  is_active = TRUE
                    RETURNING id
                    """,
                    (user_id, platform_name, encrypted_credentials),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RecordNotFoundError(
                f"Upsert into platform_connections for user {user_id} returned no row"
            )
        return int(row[0])

    def _check_sealed_column(self, table: str, column: str) -> None:
        if column not in self.SEALED_COLUMNS.get(table, frozenset()):
            raise UnknownSealedColumnError(f"{table}.{column} is not an encrypted column")
