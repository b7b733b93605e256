# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Filesystem collaborator for stage transitions.

Key Features:

- **Atomic-or-failed** - Every move and copy either completes or leaves the
  destination untouched. Copies (and cross-device moves) write to a
  temporary ``.part`` file first, then atomically rename it into place.
- **No overwrites** - A destination that already exists is a failure; the
  stage folders are the only durable state, so nothing is silently replaced.
- **Typed failures** - Every OSError surfaces as FilesystemError with the
  original error chained as ``__cause__``.

Example:
    from pathlib import Path
    from driverstage.io import LocalFileSystem

    fs = LocalFileSystem()
    for path in fs.list_files(Path("Drivers/New"), "NVIDIA_Driver_v*.exe"):
        print(path)

"""

from __future__ import annotations

import errno
import fnmatch
import os
from pathlib import Path
import shutil
from typing import Protocol

from driverstage.exceptions import FilesystemError


class FileSystem(Protocol):
    """Protocol for the filesystem operations the core relies on."""

    def list_files(self, directory: Path, pattern: str) -> list[Path]:
        """List regular files in directory whose name matches a glob pattern."""
        ...

    def move_file(self, src: Path, dst: Path) -> Path:
        """Move src to dst atomically, returning dst."""
        ...

    def copy_file(self, src: Path, dst: Path) -> Path:
        """Copy src to dst atomically, returning dst."""
        ...


def _part_path(dst: Path) -> Path:
    return dst.with_name(dst.name + ".part")


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


class LocalFileSystem:
    """FileSystem implementation backed by the local disk."""

    def list_files(self, directory: Path, pattern: str) -> list[Path]:
        """List regular files in directory matching pattern (case-sensitive).

        A missing directory lists as empty. Results are sorted by name.

        Raises:
            FilesystemError: If the directory exists but cannot be read.
        """
        try:
            entries = list(directory.iterdir())
        except FileNotFoundError:
            return []
        except OSError as err:
            raise FilesystemError("list", directory) from err
        return sorted(
            (p for p in entries if p.is_file() and fnmatch.fnmatchcase(p.name, pattern)),
            key=lambda p: p.name,
        )

    def move_file(self, src: Path, dst: Path) -> Path:
        """Move a file, never overwriting the destination.

        Uses a rename when src and dst share a device. Across devices the
        file is copied to ``<dst>.part``, renamed into place, and only then
        is the source removed.

        Raises:
            FilesystemError: If the destination exists, the source is
                missing, or any step fails. When the copy succeeded but the
                source could not be removed, the message says so (the file
                then exists in both places).
        """
        if dst.exists():
            raise FilesystemError("move", src, dst, f"destination already exists: {dst}")
        try:
            os.replace(src, dst)
            return dst
        except OSError as err:
            if err.errno != errno.EXDEV:
                raise FilesystemError("move", src, dst) from err

        self._copy_atomic("move", src, dst)
        try:
            src.unlink()
        except OSError as err:
            raise FilesystemError(
                "move",
                src,
                dst,
                f"partial move: {dst} written but source {src} could not be removed",
            ) from err
        return dst

    def copy_file(self, src: Path, dst: Path) -> Path:
        """Copy a file (with metadata), never overwriting the destination.

        Raises:
            FilesystemError: If the destination exists or the copy fails.
        """
        if dst.exists():
            raise FilesystemError("copy", src, dst, f"destination already exists: {dst}")
        self._copy_atomic("copy", src, dst)
        return dst

    def _copy_atomic(self, operation: str, src: Path, dst: Path) -> None:
        tmp = _part_path(dst)
        try:
            shutil.copy2(src, tmp)
            tmp.replace(dst)
        except OSError as err:
            _discard(tmp)
            raise FilesystemError(operation, src, dst) from err
