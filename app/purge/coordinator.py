"""Emergency purge of everything a user owns.

Processing flow:
1. Collect the PurgeSet (sealed storage paths of the user's posts).
2. Delete each file; every outcome becomes an OperationResult, nothing
   short-circuits.
3. Delete the user's rows, regardless of how step 2 went.
4. Terminate the user's sessions, regardless of how steps 1-3 went.

A missing file or IO error is a warning in the report, never a rollback.
"""

from app.crypto.exceptions import EncryptionError
from app.crypto.field_cipher import FieldEncryptionService
from app.database.models import StoredAsset
from app.database.repositories.base import BaseUserDataStore
from app.logging.logger import Log
from app.purge.exceptions import RecordPurgeError
from app.purge.models import OperationResult, PurgeReport, PurgeSet, PurgeStatus
from app.purge.session import SessionTerminator
from app.storage.asset_store import AssetStore
from app.storage.exceptions import StorageError


class PurgeCoordinator:
    """Best-effort, partial-failure-tolerant deletion of a user's files and records."""

    def __init__(
        self,
        user_data: BaseUserDataStore,
        asset_store: AssetStore,
        cipher: FieldEncryptionService,
        sessions: SessionTerminator,
    ) -> None:
        self._user_data = user_data
        self._asset_store = asset_store
        self._cipher = cipher
        self._sessions = sessions

    def purge(self, user_id: int) -> PurgeReport:
        """Run the purge to completion.

        Raises:
            RecordPurgeError: if the user's rows could not be deleted. Sessions
                are terminated before this propagates.
        """
        Log.warning(f"Emergency purge started for user {user_id}")
        report = PurgeReport(user_id=user_id)
        try:
            purge_set, collect_result = self._collect(user_id)
            if collect_result is not None:
                report.file_results.append(collect_result)
            for asset in purge_set.assets:
                report.file_results.append(self._delete_file(asset))
            report.records_deleted = self._delete_records(user_id)
        finally:
            report.session_result = self._terminate_sessions(user_id)

        self._log_outcome(report)
        return report

    def _collect(self, user_id: int) -> tuple[PurgeSet, OperationResult | None]:
        try:
            assets = self._user_data.find_paths_for_user(user_id)
        except Exception as exc:
            # Rows are still deleted below: an orphaned file beats surviving records.
            Log.error(f"Could not collect stored paths for user {user_id}: {exc}")
            return PurgeSet(user_id=user_id), OperationResult.failed(
                "collect", f"stored paths could not be listed: {type(exc).__name__}"
            )
        return PurgeSet(user_id=user_id, assets=tuple(assets)), None

    def _delete_file(self, asset: StoredAsset) -> OperationResult:
        target = f"post {asset.record_id}"
        try:
            storage_path = self._cipher.decrypt_field(asset.sealed_path)
        except EncryptionError as exc:
            return OperationResult.failed(
                target, f"storage path could not be decrypted: {type(exc).__name__}"
            )
        try:
            removed = self._asset_store.delete(storage_path)
        except StorageError as exc:
            return OperationResult.failed(target, str(exc))
        if not removed:
            return OperationResult.skipped(target, "file already absent")
        return OperationResult.ok(target)

    def _delete_records(self, user_id: int) -> int:
        try:
            return self._user_data.delete_all_for_user(user_id)
        except Exception as exc:
            Log.error(f"Could not delete records for user {user_id}: {exc}")
            raise RecordPurgeError(f"Records for user {user_id} could not be deleted") from exc

    def _terminate_sessions(self, user_id: int) -> OperationResult:
        try:
            self._sessions.terminate(user_id)
        except Exception as exc:
            Log.error(f"Could not terminate sessions for user {user_id}: {exc}")
            return OperationResult.failed("session", type(exc).__name__)
        return OperationResult.ok("session")

    def _log_outcome(self, report: PurgeReport) -> None:
        if report.status is PurgeStatus.COMPLETED:
            Log.info(
                f"Purge completed for user {report.user_id}: "
                f"{len(report.file_results)} files, {report.records_deleted} rows deleted"
            )
            return
        for warning in report.warnings:
            Log.warning(
                f"Purge warning for user {report.user_id}: {warning.target} "
                f"{warning.status.value} ({warning.reason})"
            )
        Log.warning(
            f"Purge completed with {len(report.warnings)} warnings for user "
            f"{report.user_id}: {report.records_deleted} rows deleted"
        )
