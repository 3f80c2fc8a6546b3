from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.crypto.field_cipher import FieldEncryptionService
from app.database.repositories.user_data_repository import UserDataRepository
from app.main import build_purge_coordinator
from app.processor.models import RawUpload
from app.processor.upload_processor import build_upload_processor
from app.purge.models import OperationStatus, PurgeStatus
from app.records.sealed_records import SealedRecordService
from app.storage.asset_store import AssetStore
from tests.helpers import count_rows


@pytest.mark.integration
class TestEmergencyPurge:
    def test_upload_then_purge_leaves_nothing_behind(
        self,
        tmp_path: Path,
        db_conn: psycopg.Connection[Any],
        seed_user: int,
        seed_session: str,
        cipher: FieldEncryptionService,
        jpeg_with_metadata: bytes,
        png_with_metadata: bytes,
    ) -> None:
        settings = Settings()
        processor = build_upload_processor(settings, storage_root=tmp_path)
        records = SealedRecordService(cipher, UserDataRepository())
        store = AssetStore(storage_root=tmp_path)

        stored_paths = []
        for data, mime in ((jpeg_with_metadata, "image/jpeg"), (png_with_metadata, "image/png")):
            result = processor.process(RawUpload(data, mime))
            assert result.success, result.error_message
            assert result.storage_path is not None
            records.create_post(seed_user, "post", storage_path=result.storage_path)
            stored_paths.append(result.storage_path)
        # A post whose file vanished out of band.
        records.create_post(seed_user, "post", storage_path="/uploads/" + "0" * 32 + ".jpg")

        report = build_purge_coordinator(settings, cipher, storage_root=tmp_path).purge(
            seed_user
        )

        assert report.status is PurgeStatus.COMPLETED_WITH_ERRORS
        assert [w.status for w in report.warnings] == [OperationStatus.SKIPPED]
        assert all(not store.resolve(path).exists() for path in stored_paths)
        assert list(store.uploads_dir.iterdir()) == []
        for table in ("users", "posts", "sessions"):
            assert count_rows(db_conn, table, seed_user) == 0
