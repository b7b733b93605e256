"""
Tests for driverstage.repository module.

Tests driver discovery including:
- Filename pattern matching and vendor isolation
- Case-insensitive vendor matching
- Deterministic choice among several matches
- No side effects and no caching
"""

from __future__ import annotations

import pytest

from driverstage.repository import DriverRepository, StageSet, vendor_glob

pytestmark = pytest.mark.unit


class TestVendorGlob:
    """Tests for vendor_glob."""

    def test_letters_become_classes(self):
        assert vendor_glob("{vendor}_Driver_v*.exe", "Amd") == "[aA][mM][dD]_Driver_v*.exe"

    def test_metacharacters_are_escaped(self):
        assert vendor_glob("{vendor}.exe", "A*1") == "[aA][*]1.exe"


class TestFindDriver:
    """Tests for DriverRepository.find_driver."""

    def test_finds_matching_driver(self, stages, make_driver):
        path = make_driver(stages.active, "NVIDIA_Driver_v1.0.exe")
        repo = DriverRepository()

        driver = repo.find_driver(stages.active, "NVIDIA", "active")

        assert driver is not None
        assert driver.path == path.absolute()
        assert driver.vendor == "NVIDIA"
        assert driver.stage == "active"
        assert driver.version_token == "1.0."

    def test_returns_none_when_empty(self, stages):
        assert DriverRepository().find_driver(stages.new, "NVIDIA", "new") is None

    def test_missing_directory_lists_empty(self, tmp_test_dir):
        repo = DriverRepository()
        assert repo.find_driver(tmp_test_dir / "nope", "NVIDIA", "new") is None

    def test_vendor_isolation(self, stages, make_driver):
        make_driver(stages.new, "AMD_Driver_v9.0.exe")
        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe")
        repo = DriverRepository()

        assert repo.find_driver(stages.new, "NVIDIA", "new").name == "NVIDIA_Driver_v2.0.exe"
        assert repo.find_driver(stages.new, "AMD", "new").name == "AMD_Driver_v9.0.exe"
        assert repo.find_driver(stages.new, "Intel", "new") is None

    def test_vendor_match_is_case_insensitive(self, stages, make_driver):
        make_driver(stages.active, "nvidia_Driver_v1.0.exe")
        driver = DriverRepository().find_driver(stages.active, "NVIDIA", "active")
        assert driver is not None
        assert driver.name == "nvidia_Driver_v1.0.exe"

    def test_rest_of_pattern_is_exact(self, stages, make_driver):
        make_driver(stages.active, "NVIDIA_Driver_v1.0.msi")
        make_driver(stages.active, "NVIDIA_Tool_v1.0.exe")
        assert DriverRepository().find_driver(stages.active, "NVIDIA", "active") is None

    def test_prefix_vendor_does_not_leak(self, stages, make_driver):
        """Test that vendor 'AMD' does not pick up 'AMDX_Driver_...'."""
        make_driver(stages.new, "AMDX_Driver_v5.0.exe")
        assert DriverRepository().find_driver(stages.new, "AMD", "new") is None

    def test_directories_are_ignored(self, stages):
        (stages.new / "NVIDIA_Driver_v3.0.exe").mkdir()
        assert DriverRepository().find_driver(stages.new, "NVIDIA", "new") is None

    def test_multiple_matches_pick_greatest_name(self, stages, make_driver):
        make_driver(stages.new, "NVIDIA_Driver_v1.9.exe")
        make_driver(stages.new, "NVIDIA_Driver_v1.10.exe")
        make_driver(stages.new, "NVIDIA_Driver_v1.2.exe")

        driver = DriverRepository().find_driver(stages.new, "NVIDIA", "new")

        # Lexicographic, not numeric: "v1.9" > "v1.2" > "v1.10"
        assert driver.name == "NVIDIA_Driver_v1.9.exe"

    def test_unversioned_match_is_still_discovered(self, stages, make_driver):
        make_driver(stages.new, "NVIDIA_Driver_vX.exe")
        driver = DriverRepository().find_driver(stages.new, "NVIDIA", "new")
        assert driver is not None
        assert driver.version_token is None

    def test_no_caching_between_calls(self, stages, make_driver):
        repo = DriverRepository()
        assert repo.find_driver(stages.new, "NVIDIA", "new") is None

        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe")

        assert repo.find_driver(stages.new, "NVIDIA", "new") is not None

    def test_read_only(self, stages, make_driver):
        make_driver(stages.new, "NVIDIA_Driver_v2.0.exe")
        before = sorted(p.name for p in stages.new.iterdir())

        DriverRepository().find_driver(stages.new, "NVIDIA", "new")

        assert sorted(p.name for p in stages.new.iterdir()) == before

    def test_custom_pattern(self, stages, make_driver):
        make_driver(stages.active, "drv-Realtek-v6.0.zip")
        repo = DriverRepository(filename_pattern="drv-{vendor}-v*.zip")
        assert repo.find_driver(stages.active, "REALTEK", "active") is not None


class TestListDrivers:
    """Tests for DriverRepository.list_drivers."""

    def test_sorted_by_name(self, stages, make_driver):
        for name in ["AMD_Driver_v2.0.exe", "AMD_Driver_v1.0.exe", "AMD_Driver_v1.0-1.exe"]:
            make_driver(stages.archive, name)

        drivers = DriverRepository().list_drivers(stages.archive, "AMD", "archive")

        assert [d.name for d in drivers] == [
            "AMD_Driver_v1.0-1.exe",
            "AMD_Driver_v1.0.exe",
            "AMD_Driver_v2.0.exe",
        ]
        assert all(d.stage == "archive" for d in drivers)


class TestStageSet:
    """Tests for StageSet helpers."""

    def test_from_base_defaults(self, tmp_test_dir):
        s = StageSet.from_base(tmp_test_dir)
        assert s.native == tmp_test_dir / "Native"
        assert s.active == tmp_test_dir / "Active"
        assert s.new == tmp_test_dir / "New"
        assert s.archive == tmp_test_dir / "Archive"

    def test_from_base_custom_folder(self, tmp_test_dir):
        s = StageSet.from_base(tmp_test_dir, {"new": "Incoming"})
        assert s.new == tmp_test_dir / "Incoming"
        assert s.active == tmp_test_dir / "Active"

    def test_ensure_creates_missing(self, tmp_test_dir):
        s = StageSet.from_base(tmp_test_dir / "base")
        assert len(s.missing()) == 4

        created = s.ensure()

        assert len(created) == 4
        assert s.missing() == []
        assert s.ensure() == []
