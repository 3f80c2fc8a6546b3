import argparse
import sys
from pathlib import Path

from app.config.settings import Settings
from app.crypto.field_cipher import FieldEncryptionService
from app.crypto.keys import KeyMaterial
from app.database.connection import close_pool, init_pool
from app.database.repositories.session_repository import SessionRepository
from app.database.repositories.user_data_repository import UserDataRepository
from app.logging.logger import Log
from app.processor.models import RawUpload
from app.processor.upload_processor import build_upload_processor
from app.purge.coordinator import PurgeCoordinator
from app.purge.exceptions import RecordPurgeError
from app.storage.asset_store import AssetStore


def build_purge_coordinator(
    settings: Settings,
    cipher: FieldEncryptionService,
    storage_root: Path | None = None,
) -> PurgeCoordinator:
    """Build a PurgeCoordinator backed by the database and the asset store."""
    root = storage_root if storage_root is not None else Path(settings.storage_root)
    return PurgeCoordinator(
        user_data=UserDataRepository(),
        asset_store=AssetStore(storage_root=root),
        cipher=cipher,
        sessions=SessionRepository(),
    )


def _scrub(settings: Settings, path: Path, mime: str) -> int:
    processor = build_upload_processor(settings)
    result = processor.process(RawUpload(data=path.read_bytes(), declared_mime=mime))
    if not result.success:
        Log.error(f"Scrub failed for {path.name}: {result.error_message}")
        return 1
    Log.info(f"Scrubbed {path.name} -> {result.storage_path}")
    return 0


def _purge(settings: Settings, user_id: int) -> int:
    cipher = FieldEncryptionService(KeyMaterial.from_settings(settings))
    init_pool(settings)
    try:
        report = build_purge_coordinator(settings, cipher).purge(user_id)
    except RecordPurgeError as exc:
        Log.error(str(exc))
        return 2
    finally:
        close_pool()
    Log.info(f"Purge for user {user_id}: {report.status.value}")
    return 0


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Media privacy core maintenance commands.")
    commands = parser.add_subparsers(dest="command", required=True)

    scrub = commands.add_parser("scrub", help="Scrub one media file into the asset store")
    scrub.add_argument("path", type=Path, help="File to scrub")
    scrub.add_argument("--mime", required=True, help="Declared MIME type, e.g. image/jpeg")

    purge = commands.add_parser("purge", help="Irreversibly purge all data of one user")
    purge.add_argument("user_id", type=int)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> configure logging -> run command."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    if args.command == "scrub":
        path = args.path.expanduser().resolve()
        if not path.is_file():
            Log.error(f"Not found: {path}")
            return 1
        return _scrub(settings, path, args.mime)
    return _purge(settings, args.user_id)


if __name__ == "__main__":
    sys.exit(main())
