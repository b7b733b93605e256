"""
Tests for driverstage.executor module.

Tests the two-step promotion including:
- Active -> Archive then New -> Active
- Bootstrap promotion with no current driver
- Failure before and after the archive step
- Archive name collisions
- Rescan notification rules
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from driverstage.exceptions import FilesystemError
from driverstage.executor import PromotionExecutor, _archive_destination
from driverstage.io import LocalFileSystem
from driverstage.repository import DriverFile, DriverRepository

pytestmark = pytest.mark.unit


class FailingSecondMove(LocalFileSystem):
    """Filesystem whose move into Active always fails."""

    def __init__(self, active_dir: Path) -> None:
        self.active_dir = active_dir

    def move_file(self, src: Path, dst: Path) -> Path:
        if dst.parent == self.active_dir:
            raise FilesystemError("move", src, dst, "simulated disk error")
        return super().move_file(src, dst)


def _files(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.iterdir())


class TestPromote:
    """Tests for PromotionExecutor.promote."""

    def test_promote_archives_then_installs(self, stages, make_driver):
        make_driver(stages.active, "NVIDIA_Driver_v1.0.exe", b"old bits")
        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe", b"new bits")
        repo = DriverRepository()
        current = repo.find_driver(stages.active, "NVIDIA", "active")
        candidate = repo.find_driver(stages.new, "NVIDIA", "new")
        rescanner = MagicMock()

        record = PromotionExecutor(stages, rescanner=rescanner).promote(
            "NVIDIA", current, candidate
        )

        assert record.result == "promoted"
        assert str(record.from_version) == "1.0"
        assert str(record.to_version) == "2.0"
        assert record.archived_path == stages.archive / "NVIDIA_Driver_v1.0.exe"
        assert record.installed_path == stages.active / "NVIDIA_Driver_v2.0.exe"
        # Contents survive the round trip unchanged
        assert (stages.archive / "NVIDIA_Driver_v1.0.exe").read_bytes() == b"old bits"
        assert (stages.active / "NVIDIA_Driver_v2.0.exe").read_bytes() == b"new bits"
        assert _files(stages.active) == ["NVIDIA_Driver_v2.0.exe"]
        assert repo.find_driver(stages.new, "NVIDIA", "new") is None
        rescanner.notify_driver_installed.assert_called_once_with()

    def test_bootstrap_promotion(self, stages, make_driver):
        make_driver(stages.new, "AMD_Driver_v1.0.exe")
        candidate = DriverRepository().find_driver(stages.new, "AMD", "new")

        record = PromotionExecutor(stages).promote("AMD", None, candidate)

        assert record.result == "promoted"
        assert record.from_version is None
        assert record.archived_path is None
        assert _files(stages.active) == ["AMD_Driver_v1.0.exe"]
        assert _files(stages.archive) == []

    def test_install_failure_leaves_archive_entry(self, stages, make_driver):
        make_driver(stages.active, "NVIDIA_Driver_v1.0.exe")
        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe")
        repo = DriverRepository()
        current = repo.find_driver(stages.active, "NVIDIA", "active")
        candidate = repo.find_driver(stages.new, "NVIDIA", "new")
        rescanner = MagicMock()

        record = PromotionExecutor(
            stages, filesystem=FailingSecondMove(stages.active), rescanner=rescanner
        ).promote("NVIDIA", current, candidate)

        assert record.result == "failed"
        assert isinstance(record.error, FilesystemError)
        assert record.archived_path == stages.archive / "NVIDIA_Driver_v1.0.exe"
        assert "previous version kept at" in record.reason
        # Degraded but recoverable: no Active driver, previous one archived
        assert _files(stages.active) == []
        assert _files(stages.archive) == ["NVIDIA_Driver_v1.0.exe"]
        assert _files(stages.new) == ["NVIDIA_Driver_v2.0.exe"]
        rescanner.notify_driver_installed.assert_not_called()

    def test_archive_failure_changes_nothing(self, stages, make_driver):
        make_driver(stages.active, "NVIDIA_Driver_v1.0.exe")
        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe")
        repo = DriverRepository()
        current = repo.find_driver(stages.active, "NVIDIA", "active")
        candidate = repo.find_driver(stages.new, "NVIDIA", "new")
        fs = MagicMock(spec=LocalFileSystem)
        fs.move_file.side_effect = FilesystemError("move", "a", "b")

        record = PromotionExecutor(stages, filesystem=fs).promote(
            "NVIDIA", current, candidate
        )

        assert record.result == "failed"
        assert record.archived_path is None
        assert fs.move_file.call_count == 1
        assert _files(stages.active) == ["NVIDIA_Driver_v1.0.exe"]
        assert _files(stages.new) == ["NVIDIA_Driver_v2.0.exe"]

    def test_preflight_conflict_changes_nothing(self, stages, make_driver):
        """Test that a name clash in Active fails before archiving."""
        make_driver(stages.active, "NVIDIA_Driver_v1.0.exe")
        make_driver(stages.active, "NVIDIA_Driver_v2.0.exe", b"stray copy")
        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe", b"candidate")
        current = DriverFile(
            vendor="NVIDIA",
            version_token="1.0.",
            path=(stages.active / "NVIDIA_Driver_v1.0.exe").absolute(),
            stage="active",
        )
        candidate = DriverRepository().find_driver(stages.new, "NVIDIA", "new")

        record = PromotionExecutor(stages).promote("NVIDIA", current, candidate)

        assert record.result == "failed"
        assert "Active already contains" in record.reason
        assert _files(stages.archive) == []
        assert (stages.new / "NVIDIA_Driver_v2.0.exe").read_bytes() == b"candidate"

    def test_current_already_gone_is_tolerated(self, stages, make_driver):
        path = make_driver(stages.active, "NVIDIA_Driver_v1.0.exe")
        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe")
        repo = DriverRepository()
        current = repo.find_driver(stages.active, "NVIDIA", "active")
        candidate = repo.find_driver(stages.new, "NVIDIA", "new")
        path.unlink()

        record = PromotionExecutor(stages).promote("NVIDIA", current, candidate)

        assert record.result == "promoted"
        assert record.archived_path is None
        assert _files(stages.active) == ["NVIDIA_Driver_v2.0.exe"]

    def test_archive_collision_keeps_both(self, stages, make_driver):
        make_driver(stages.archive, "NVIDIA_Driver_v1.0.exe", b"first archive")
        make_driver(stages.active, "NVIDIA_Driver_v1.0.exe", b"second")
        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe")
        repo = DriverRepository()
        current = repo.find_driver(stages.active, "NVIDIA", "active")
        candidate = repo.find_driver(stages.new, "NVIDIA", "new")

        record = PromotionExecutor(stages).promote("NVIDIA", current, candidate)

        assert record.result == "promoted"
        assert record.archived_path == stages.archive / "NVIDIA_Driver_v1.0-1.exe"
        assert (stages.archive / "NVIDIA_Driver_v1.0.exe").read_bytes() == b"first archive"
        assert (stages.archive / "NVIDIA_Driver_v1.0-1.exe").read_bytes() == b"second"

    def test_rescan_failure_does_not_fail_promotion(self, stages, make_driver):
        make_driver(stages.new, "Intel_Driver_v3.2.exe")
        candidate = DriverRepository().find_driver(stages.new, "Intel", "new")
        rescanner = MagicMock()
        rescanner.notify_driver_installed.side_effect = OSError("pnputil not found")

        record = PromotionExecutor(stages, rescanner=rescanner).promote(
            "Intel", None, candidate
        )

        assert record.result == "promoted"
        rescanner.notify_driver_installed.assert_called_once_with()


class TestArchiveDestination:
    """Tests for _archive_destination."""

    def test_free_name(self, tmp_test_dir):
        assert _archive_destination(tmp_test_dir, "A_Driver_v1.0.exe") == (
            tmp_test_dir / "A_Driver_v1.0.exe"
        )

    def test_numbered_names(self, tmp_test_dir):
        (tmp_test_dir / "A_Driver_v1.0.exe").write_text("x")
        (tmp_test_dir / "A_Driver_v1.0-1.exe").write_text("x")
        assert _archive_destination(tmp_test_dir, "A_Driver_v1.0.exe") == (
            tmp_test_dir / "A_Driver_v1.0-2.exe"
        )
