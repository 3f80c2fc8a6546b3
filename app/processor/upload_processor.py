from collections.abc import Callable
from pathlib import Path

from app.config.settings import Settings
from app.logging.logger import Log
from app.processor.exceptions import UnsupportedTypeError, UploadError, UploadTooLargeError
from app.processor.models import ErrorKind, RawUpload, ScrubResult
from app.scrubbing.base import BaseScrubber
from app.scrubbing.exceptions import InvalidContainerError, ScrubError
from app.scrubbing.factory import ScrubberFactory
from app.scrubbing.format_detector import FormatDetector
from app.scrubbing.models import MediaKind
from app.scrubbing.snapshot import MetadataSnapshot
from app.storage.asset_store import AssetStore
from app.storage.exceptions import StorageError
from app.storage.naming import generate_storage_identifier


class UploadProcessor:
    """Orchestrates one upload from raw bytes to a stored, scrubbed asset.

    Pipeline: validate -> detect -> stage -> snapshot -> scrub -> name -> persist.
    Temp artifacts are removed whatever the outcome; nothing is persisted
    unless the scrubber verified its output.
    """

    def __init__(
        self,
        detector: FormatDetector,
        asset_store: AssetStore,
        scrubber_for: Callable[[MediaKind], BaseScrubber],
        snapshot: MetadataSnapshot,
        max_upload_bytes: int,
        name_generator: Callable[[str], str] = generate_storage_identifier,
    ) -> None:
        self._detector = detector
        self._asset_store = asset_store
        self._scrubber_for = scrubber_for
        self._snapshot = snapshot
        self._max_upload_bytes = max_upload_bytes
        self._name_generator = name_generator

    def process(self, upload: RawUpload) -> ScrubResult:
        """Scrub and store *upload*. Failures are returned, not raised."""
        try:
            return self._run(upload)
        except (UploadError, ScrubError, StorageError) as exc:
            kind = self._error_kind(exc)
            Log.warning(f"Upload rejected ({kind.value}): {exc}")
            return ScrubResult.failed(kind, str(exc))

    def _run(self, upload: RawUpload) -> ScrubResult:
        self._validate(upload)
        detected = self._detector.detect(upload.data, upload.declared_mime)
        if detected.kind is MediaKind.UNSUPPORTED or detected.extension is None:
            raise UnsupportedTypeError(
                f"File signature does not match declared type '{upload.declared_mime}'"
            )
        Log.info(f"Processing {len(upload.data)} byte upload detected as {detected.mime}")

        staged: list[Path] = []
        try:
            raw_path = self._asset_store.write_temp(upload.data)
            staged.append(raw_path)
            data = self._asset_store.read_temp(raw_path)

            snapshot = None
            if detected.kind is not MediaKind.VIDEO:
                snapshot = self._snapshot.capture(data)

            scrubbed = self._scrubber_for(detected.kind).scrub(data)

            clean_path = self._asset_store.write_temp(scrubbed)
            staged.append(clean_path)
            identifier = self._name_generator(detected.extension)
            storage_path = self._asset_store.persist(clean_path, identifier)
        finally:
            self._cleanup(staged)

        Log.info(
            f"Stored scrubbed upload ({len(scrubbed)} bytes, "
            f"{len(snapshot or {})} metadata tags removed)"
        )
        return ScrubResult(
            success=True,
            storage_path=storage_path,
            original_metadata_snapshot=snapshot,
        )

    def _validate(self, upload: RawUpload) -> None:
        if not self._detector.is_allowed(upload.declared_mime):
            raise UnsupportedTypeError(f"Type '{upload.declared_mime}' is not allowed")
        if len(upload.data) > self._max_upload_bytes:
            raise UploadTooLargeError(
                f"Upload of {len(upload.data)} bytes exceeds limit of {self._max_upload_bytes}"
            )

    def _cleanup(self, staged: list[Path]) -> None:
        for path in staged:
            try:
                self._asset_store.cleanup_temp(path)
            except StorageError as exc:
                Log.warning(f"Temp cleanup failed: {exc}")

    @staticmethod
    def _error_kind(exc: Exception) -> ErrorKind:
        if isinstance(exc, UploadTooLargeError):
            return ErrorKind.UPLOAD_TOO_LARGE
        if isinstance(exc, UploadError):
            return ErrorKind.UNSUPPORTED_TYPE
        if isinstance(exc, InvalidContainerError):
            return ErrorKind.INVALID_CONTAINER
        if isinstance(exc, ScrubError):
            return ErrorKind.SCRUB_FAILURE
        return ErrorKind.IO_FAILURE


def build_upload_processor(
    settings: Settings,
    storage_root: Path | None = None,
) -> UploadProcessor:
    """Build an UploadProcessor with all required adapters."""
    root = storage_root if storage_root is not None else Path(settings.storage_root)
    return UploadProcessor(
        detector=FormatDetector(),
        asset_store=AssetStore(storage_root=root),
        scrubber_for=lambda kind: ScrubberFactory.create(kind, settings),
        snapshot=MetadataSnapshot(),
        max_upload_bytes=settings.max_upload_bytes,
    )
