from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from app.main import main
from app.purge.exceptions import RecordPurgeError
from app.purge.models import PurgeReport


class TestScrubCommand:
    def test_scrubs_file_into_storage_root(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, jpeg_with_metadata: bytes
    ) -> None:
        monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
        source = tmp_path / "holiday.jpg"
        source.write_bytes(jpeg_with_metadata)

        assert main(["scrub", str(source), "--mime", "image/jpeg"]) == 0
        assert len(list((tmp_path / "storage" / "uploads").iterdir())) == 1

    def test_missing_file_returns_error(self, tmp_path: Path) -> None:
        assert main(["scrub", str(tmp_path / "nope.jpg"), "--mime", "image/jpeg"]) == 1

    def test_rejected_upload_returns_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, mp4_bytes: bytes
    ) -> None:
        monkeypatch.setenv("STORAGE_ROOT", str(tmp_path / "storage"))
        source = tmp_path / "clip.mp4"
        source.write_bytes(mp4_bytes)

        assert main(["scrub", str(source), "--mime", "video/mp4"]) == 1


class TestPurgeCommand:
    @patch("app.main.close_pool")
    @patch("app.main.init_pool")
    @patch("app.main.build_purge_coordinator")
    def test_runs_purge_and_closes_pool(
        self, mock_build: MagicMock, mock_init: MagicMock, mock_close: MagicMock
    ) -> None:
        mock_build.return_value.purge.return_value = PurgeReport(user_id=7)

        assert main(["purge", "7"]) == 0

        mock_build.return_value.purge.assert_called_once_with(7)
        mock_init.assert_called_once()
        mock_close.assert_called_once()

    @patch("app.main.close_pool")
    @patch("app.main.init_pool")
    @patch("app.main.build_purge_coordinator")
    def test_record_purge_failure_returns_2(
        self, mock_build: MagicMock, _mock_init: MagicMock, mock_close: MagicMock
    ) -> None:
        mock_build.return_value.purge.side_effect = RecordPurgeError("Records for user 7")

        assert main(["purge", "7"]) == 2
        mock_close.assert_called_once()

    def test_user_id_must_be_integer(self) -> None:
        with pytest.raises(SystemExit):
            main(["purge", "alice"])
