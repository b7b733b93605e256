"""
Tests for driverstage.io.filesystem module.

Tests the local filesystem collaborator including:
- Pattern listing
- Moves and copies that never overwrite
- Cross-device moves through a .part file
- Error wrapping into FilesystemError
"""

from __future__ import annotations

import errno
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from driverstage.exceptions import FilesystemError
from driverstage.io import LocalFileSystem

pytestmark = pytest.mark.unit


class TestListFiles:
    """Tests for LocalFileSystem.list_files."""

    def test_lists_matching_files_sorted(self, tmp_test_dir):
        for name in ["b.exe", "a.exe", "c.txt"]:
            (tmp_test_dir / name).write_text(name)

        result = LocalFileSystem().list_files(tmp_test_dir, "*.exe")

        assert [p.name for p in result] == ["a.exe", "b.exe"]

    def test_match_is_case_sensitive(self, tmp_test_dir):
        (tmp_test_dir / "A.EXE").write_text("x")
        assert LocalFileSystem().list_files(tmp_test_dir, "*.exe") == []

    def test_missing_directory_is_empty(self, tmp_test_dir):
        assert LocalFileSystem().list_files(tmp_test_dir / "missing", "*") == []


class TestMoveFile:
    """Tests for LocalFileSystem.move_file."""

    def test_move(self, tmp_test_dir):
        src = tmp_test_dir / "src.exe"
        src.write_bytes(b"payload")
        dst = tmp_test_dir / "sub" / "dst.exe"
        dst.parent.mkdir()

        result = LocalFileSystem().move_file(src, dst)

        assert result == dst
        assert not src.exists()
        assert dst.read_bytes() == b"payload"

    def test_move_refuses_to_overwrite(self, tmp_test_dir):
        src = tmp_test_dir / "src.exe"
        src.write_bytes(b"new")
        dst = tmp_test_dir / "dst.exe"
        dst.write_bytes(b"old")

        with pytest.raises(FilesystemError, match="already exists"):
            LocalFileSystem().move_file(src, dst)

        assert src.read_bytes() == b"new"
        assert dst.read_bytes() == b"old"

    def test_move_missing_source_raises(self, tmp_test_dir):
        with pytest.raises(FilesystemError) as excinfo:
            LocalFileSystem().move_file(tmp_test_dir / "nope.exe", tmp_test_dir / "dst.exe")
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)
        assert excinfo.value.operation == "move"

    def test_cross_device_move_copies_then_unlinks(self, tmp_test_dir):
        src = tmp_test_dir / "src.exe"
        src.write_bytes(b"payload")
        dst = tmp_test_dir / "dst.exe"

        real_replace = os.replace

        def fake_replace(a, b):
            if Path(a) == src:
                raise OSError(errno.EXDEV, "Invalid cross-device link")
            return real_replace(a, b)

        with patch("driverstage.io.filesystem.os.replace", side_effect=fake_replace):
            LocalFileSystem().move_file(src, dst)

        assert not src.exists()
        assert dst.read_bytes() == b"payload"
        assert not (tmp_test_dir / "dst.exe.part").exists()


class TestCopyFile:
    """Tests for LocalFileSystem.copy_file."""

    def test_copy_keeps_source(self, tmp_test_dir):
        src = tmp_test_dir / "src.exe"
        src.write_bytes(b"payload")
        dst = tmp_test_dir / "dst.exe"

        LocalFileSystem().copy_file(src, dst)

        assert src.read_bytes() == b"payload"
        assert dst.read_bytes() == b"payload"
        assert not (tmp_test_dir / "dst.exe.part").exists()

    def test_copy_refuses_to_overwrite(self, tmp_test_dir):
        src = tmp_test_dir / "src.exe"
        src.write_bytes(b"new")
        dst = tmp_test_dir / "dst.exe"
        dst.write_bytes(b"old")

        with pytest.raises(FilesystemError):
            LocalFileSystem().copy_file(src, dst)
        assert dst.read_bytes() == b"old"

    def test_failed_copy_leaves_no_part_file(self, tmp_test_dir):
        src = tmp_test_dir / "src.exe"
        src.write_bytes(b"payload")
        dst = tmp_test_dir / "dst.exe"

        with patch(
            "driverstage.io.filesystem.shutil.copy2",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(FilesystemError) as excinfo:
                LocalFileSystem().copy_file(src, dst)

        assert isinstance(excinfo.value.__cause__, PermissionError)
        assert not dst.exists()
        assert not (tmp_test_dir / "dst.exe.part").exists()
