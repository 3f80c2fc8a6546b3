from typing import Any

import psycopg
import pytest

from app.crypto.field_cipher import FieldEncryptionService
from app.database.repositories.session_repository import SessionRepository
from app.database.repositories.user_data_repository import UserDataRepository
from app.records.exceptions import DataIntegrityError, RecordNotFoundError
from app.records.sealed_records import SealedRecordService
from tests.helpers import count_rows


@pytest.mark.integration
class TestSealedPosts:
    def test_post_fields_are_stored_sealed_and_read_back(
        self,
        db_conn: psycopg.Connection[Any],
        seed_user: int,
        cipher: FieldEncryptionService,
    ) -> None:
        service = SealedRecordService(cipher, UserDataRepository())

        post_id = service.create_post(seed_user, "Title", "Plans", "/uploads/" + "a" * 32 + ".jpg")

        with db_conn.cursor() as cur:
            cur.execute("SELECT encrypted_title FROM posts WHERE id = %s", (post_id,))
            row = cur.fetchone()
        db_conn.commit()
        assert row is not None
        assert "Title" not in row[0]
        post = service.load_post(post_id)
        assert (post.title, post.description) == ("Title", "Plans")

    def test_tampered_column_is_integrity_error(
        self,
        db_conn: psycopg.Connection[Any],
        seed_user: int,
        cipher: FieldEncryptionService,
    ) -> None:
        service = SealedRecordService(cipher, UserDataRepository())
        post_id = service.create_post(seed_user, "Title")
        with db_conn.cursor() as cur:
            cur.execute(
                "UPDATE posts SET encrypted_title = %s WHERE id = %s",
                ("00" * 16 + ":" + "11" * 16 + ":abcd", post_id),
            )
        db_conn.commit()

        with pytest.raises(DataIntegrityError):
            service.load_post(post_id)

    def test_missing_record_raises(self) -> None:
        with pytest.raises(RecordNotFoundError):
            UserDataRepository().read_encrypted_field("posts", 999_999_999, "encrypted_title")


@pytest.mark.integration
class TestPlatformConnections:
    def test_upsert_replaces_credentials(
        self, seed_user: int, cipher: FieldEncryptionService
    ) -> None:
        service = SealedRecordService(cipher, UserDataRepository())

        first = service.save_platform_credentials(seed_user, "mastodon", {"token": "one"})
        second = service.save_platform_credentials(seed_user, "mastodon", {"token": "two"})

        assert first == second
        assert service.load_platform_credentials(second) == {"token": "two"}


@pytest.mark.integration
class TestDeleteAllForUser:
    def test_removes_every_user_row(
        self,
        db_conn: psycopg.Connection[Any],
        seed_user: int,
        seed_session: str,
        cipher: FieldEncryptionService,
    ) -> None:
        repo = UserDataRepository()
        service = SealedRecordService(cipher, repo)
        for index in range(3):
            service.create_post(seed_user, f"post {index}", storage_path=f"/uploads/{index}")
        service.save_platform_credentials(seed_user, "pixelfed", {"token": "t"})

        deleted = repo.delete_all_for_user(seed_user)

        assert deleted == 6
        for table in ("users", "posts", "platform_connections", "sessions"):
            assert count_rows(db_conn, table, seed_user) == 0

    def test_find_paths_skips_posts_without_file(
        self, seed_user: int, cipher: FieldEncryptionService
    ) -> None:
        repo = UserDataRepository()
        service = SealedRecordService(cipher, repo)
        with_file = service.create_post(seed_user, "a", storage_path="/uploads/x")
        service.create_post(seed_user, "b")

        assets = repo.find_paths_for_user(seed_user)

        assert [asset.record_id for asset in assets] == [with_file]
        assert cipher.decrypt_field(assets[0].sealed_path) == "/uploads/x"


@pytest.mark.integration
class TestSessionRepository:
    def test_terminate_removes_sessions(
        self, db_conn: psycopg.Connection[Any], seed_user: int, seed_session: str
    ) -> None:
        SessionRepository().terminate(seed_user)

        assert count_rows(db_conn, "sessions", seed_user) == 0
        assert count_rows(db_conn, "users", seed_user) == 1
