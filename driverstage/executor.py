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

"""Promotion executor: the two-step stage transition.

A promotion moves the current Active driver into Archive and then moves the
candidate from New into Active:

    Active/NVIDIA_Driver_v1.0.exe -> Archive/NVIDIA_Driver_v1.0.exe   (1)
    New/NVIDIA_Driver_v2.0.exe    -> Active/NVIDIA_Driver_v2.0.exe    (2)

Step 1 always finishes before step 2 starts; Archive is the recovery point.
If step 2 fails, the vendor is left without an Active driver but with the
previous one in Archive. That degraded state is reported as "failed" and
recovery is left to an operator; the executor never reverses step 1 on
its own.

Private Helpers:
    - _archive_destination: Pick a free name in Archive
"""

from __future__ import annotations

from pathlib import Path

from driverstage.exceptions import DriverStageError, FilesystemError
from driverstage.io import FileSystem, LocalFileSystem
from driverstage.logging import Logger, SilentLogger
from driverstage.repository import DriverFile, StageSet
from driverstage.rescan import NullRescanner, Rescanner
from driverstage.results import PromotionRecord
from driverstage.versioning import Version, parse_version


def _archive_destination(archive_dir: Path, name: str) -> Path:
    """Return a path in archive_dir for name that does not exist yet.

    Collisions get a numeric ``-<n>`` suffix before the extension
    (``NVIDIA_Driver_v1.0-1.exe``), which keeps the version token parseable.
    """
    dest = archive_dir / name
    if not dest.exists():
        return dest
    stem, suffix = Path(name).stem, Path(name).suffix
    n = 1
    while True:
        dest = archive_dir / f"{stem}-{n}{suffix}"
        if not dest.exists():
            return dest
        n += 1


def _version_or_none(driver: DriverFile | None) -> Version | None:
    if driver is None:
        return None
    try:
        return parse_version(driver.name)
    except DriverStageError:
        return None


class PromotionExecutor:
    """Performs Active -> Archive and New -> Active for one vendor."""

    def __init__(
        self,
        stages: StageSet,
        filesystem: FileSystem | None = None,
        rescanner: Rescanner | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.stages = stages
        self.filesystem = filesystem or LocalFileSystem()
        self.rescanner = rescanner or NullRescanner()
        self.logger = logger or SilentLogger()

    def promote(
        self,
        vendor: str,
        current_file: DriverFile | None,
        candidate_file: DriverFile,
    ) -> PromotionRecord:
        """Promote candidate_file to Active, archiving current_file first.

        Args:
            vendor: Vendor identifier.
            current_file: The driver in Active, or None (bootstrap).
            candidate_file: The driver in New to install.

        Returns:
            A "promoted" record on success, otherwise a "failed" record with
            the FilesystemError attached as ``error``.

        """
        from_version = _version_or_none(current_file)
        to_version = _version_or_none(candidate_file)
        target = self.stages.active / candidate_file.name

        # Preflight: refuse to start if step 2 can already be seen to fail.
        if target.exists() and (
            current_file is None or target.absolute() != current_file.path.absolute()
        ):
            err = FilesystemError(
                "move",
                candidate_file.path,
                target,
                f"Active already contains {target.name}",
            )
            self.logger.verbose("PROMOTE", f"{vendor}: {err}")
            return PromotionRecord(
                vendor=vendor,
                result="failed",
                from_version=from_version,
                to_version=to_version,
                reason=f"nothing changed: {err}",
                error=err,
            )

        # Step 1: Active -> Archive
        archived_path: Path | None = None
        if current_file is not None:
            if not current_file.path.exists():
                self.logger.verbose(
                    "PROMOTE",
                    f"{vendor}: {current_file.name} already gone from Active",
                )
            else:
                dest = _archive_destination(self.stages.archive, current_file.name)
                try:
                    archived_path = self.filesystem.move_file(current_file.path, dest)
                except FilesystemError as err:
                    self.logger.verbose("PROMOTE", f"{vendor}: archive failed: {err}")
                    return PromotionRecord(
                        vendor=vendor,
                        result="failed",
                        from_version=from_version,
                        to_version=to_version,
                        reason=f"could not archive {current_file.name}: {err}",
                        error=err,
                    )
                self.logger.verbose(
                    "PROMOTE", f"{vendor}: archived {current_file.name} -> {dest.name}"
                )

        # Step 2: New -> Active
        try:
            installed_path = self.filesystem.move_file(candidate_file.path, target)
        except FilesystemError as err:
            if archived_path is not None:
                reason = (
                    f"could not install {candidate_file.name}: {err}; "
                    f"no Active driver, previous version kept at {archived_path}"
                )
            else:
                reason = f"could not install {candidate_file.name}: {err}"
            self.logger.verbose("PROMOTE", f"{vendor}: {reason}")
            return PromotionRecord(
                vendor=vendor,
                result="failed",
                from_version=from_version,
                to_version=to_version,
                reason=reason,
                error=err,
                archived_path=archived_path,
            )

        self.logger.verbose(
            "PROMOTE", f"{vendor}: installed {candidate_file.name} into Active"
        )
        self._notify_rescan(vendor)

        return PromotionRecord(
            vendor=vendor,
            result="promoted",
            from_version=from_version,
            to_version=to_version,
            reason=f"{from_version or 'none'} -> {to_version}",
            archived_path=archived_path,
            installed_path=installed_path,
        )

    def _notify_rescan(self, vendor: str) -> None:
        # Best-effort: a failed rescan never fails the promotion.
        try:
            self.rescanner.notify_driver_installed()
        except Exception as err:
            self.logger.verbose(
                "RESCAN", f"{vendor}: Warning: device rescan failed: {err}"
            )
