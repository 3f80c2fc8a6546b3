import os
import secrets
from pathlib import Path

from app.logging.logger import Log
from app.storage.exceptions import IoFailureError, InvalidStoragePathError
from app.storage.naming import is_storage_identifier


class AssetStore:
    """Temp and permanent storage areas for uploaded media.

    Layout: {storage_root}/temp/temp_<random> for pre-scrub bytes and
    {storage_root}/uploads/<identifier> for scrubbed assets. Permanent assets
    are addressed only as "/uploads/<identifier>".
    """

    STORAGE_ROOT = Path("/app/storage")
    UPLOADS_PREFIX = "/uploads/"

    def __init__(self, storage_root: Path | None = None) -> None:
        root = storage_root if storage_root is not None else self.STORAGE_ROOT
        self._uploads_dir = root / "uploads"
        self._temp_dir = root / "temp"

    @property
    def uploads_dir(self) -> Path:
        return self._uploads_dir

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    # ------------------------------------------------------------------
    # Temp area
    # ------------------------------------------------------------------

    def write_temp(self, data: bytes) -> Path:
        """Write *data* under a random temp name. The client filename is never used."""
        path = self._temp_dir / f"temp_{secrets.token_hex(16)}"
        try:
            self._temp_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise IoFailureError(f"Could not write temp file: {exc.strerror}") from exc
        return path

    def read_temp(self, path: Path) -> bytes:
        self._check_temp(path)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise IoFailureError(f"Could not read temp file {path.name}: {exc.strerror}") from exc

    def cleanup_temp(self, path: Path) -> None:
        """Remove a temp file. A file that is already gone is fine."""
        self._check_temp(path)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise IoFailureError(
                f"Could not remove temp file {path.name}: {exc.strerror}"
            ) from exc

    # ------------------------------------------------------------------
    # Permanent area
    # ------------------------------------------------------------------

    def persist(self, temp_path: Path, identifier: str) -> str:
        """Move a scrubbed temp file to the permanent area. Returns its storage path."""
        self._check_temp(temp_path)
        if not is_storage_identifier(identifier):
            raise InvalidStoragePathError(f"'{identifier}' is not a storage identifier")
        target = self._uploads_dir / identifier
        try:
            self._uploads_dir.mkdir(parents=True, exist_ok=True)
            if target.exists():
                raise IoFailureError(f"Storage identifier collision for {identifier}")
            os.replace(temp_path, target)
        except OSError as exc:
            raise IoFailureError(f"Could not persist {identifier}: {exc.strerror}") from exc
        return f"{self.UPLOADS_PREFIX}{identifier}"

    def resolve(self, storage_path: str) -> Path:
        """Map "/uploads/<identifier>" to a file under the uploads directory."""
        if not storage_path.startswith(self.UPLOADS_PREFIX):
            raise InvalidStoragePathError("Storage path is outside the uploads area")
        identifier = storage_path[len(self.UPLOADS_PREFIX):]
        if not is_storage_identifier(identifier):
            raise InvalidStoragePathError("Storage path does not end in a storage identifier")
        return self._uploads_dir / identifier

    def delete(self, storage_path: str) -> bool:
        """Delete a permanent asset.

        Returns:
            True if the file was removed, False if it was already absent.

        Raises:
            InvalidStoragePathError: if *storage_path* is not an identifier path.
            IoFailureError: on any other filesystem error.
        """
        path = self.resolve(storage_path)
        try:
            path.unlink()
        except FileNotFoundError:
            Log.warning(f"Asset {path.name} already absent")
            return False
        except OSError as exc:
            raise IoFailureError(f"Could not delete {path.name}: {exc.strerror}") from exc
        return True

    def _check_temp(self, path: Path) -> None:
        if path.parent.resolve() != self._temp_dir.resolve():
            raise InvalidStoragePathError(f"{path.name} is not in the temp area")
