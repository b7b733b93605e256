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

"""Read-only view over the four driver stage directories.

The stage layout under a base path is:

    <base>/Native/   factory baseline drivers (read-only fallback)
    <base>/Active/   the installed driver per vendor
    <base>/New/      inbound candidate drivers
    <base>/Archive/  superseded drivers kept for rollback

Design Principles:
    - Filesystem is the source of truth; nothing is cached between calls
    - Vendor isolation comes from the filename pattern alone
    - Vendor names match case-insensitively; the rest of the pattern is exact
    - Several matches in one stage resolve to the lexicographically greatest
      filename (discovery only; the promotion decision re-parses versions)

Example:
    from pathlib import Path
    from driverstage.io import LocalFileSystem
    from driverstage.repository import DriverRepository, StageSet

    stages = StageSet.from_base(Path("C:/Drivers"))
    repo = DriverRepository(LocalFileSystem())
    current = repo.find_driver(stages.active, "NVIDIA", "active")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from driverstage.io import FileSystem, LocalFileSystem
from driverstage.logging import Logger, SilentLogger
from driverstage.versioning import extract_version_token

Stage = Literal["native", "active", "new", "archive"]

STAGE_NAMES: tuple[Stage, ...] = ("native", "active", "new", "archive")
DEFAULT_STAGE_FOLDERS: dict[str, str] = {
    "native": "Native",
    "active": "Active",
    "new": "New",
    "archive": "Archive",
}
DEFAULT_FILENAME_PATTERN = "{vendor}_Driver_v*.exe"


@dataclass(frozen=True)
class StageSet:
    """The four stage directories of one driver family.

    Attributes:
        native: Factory baseline drivers.
        active: Currently installed drivers.
        new: Inbound candidates.
        archive: Superseded drivers (rollback store).
    """

    native: Path
    active: Path
    new: Path
    archive: Path

    @classmethod
    def from_base(
        cls, base_path: Path, folders: dict[str, str] | None = None
    ) -> StageSet:
        """Build a StageSet from a base path and per-stage folder names."""
        names = {**DEFAULT_STAGE_FOLDERS, **(folders or {})}
        return cls(**{stage: base_path / names[stage] for stage in STAGE_NAMES})

    def path_for(self, stage: Stage) -> Path:
        return getattr(self, stage)

    def items(self) -> list[tuple[Stage, Path]]:
        return [(stage, self.path_for(stage)) for stage in STAGE_NAMES]

    def missing(self) -> list[Path]:
        """Return stage directories that do not exist."""
        return [p for _, p in self.items() if not p.is_dir()]

    def ensure(self) -> list[Path]:
        """Create any missing stage directories, returning the ones created."""
        created = self.missing()
        for p in created:
            p.mkdir(parents=True, exist_ok=True)
        return created


@dataclass(frozen=True)
class DriverFile:
    """A driver binary found in one stage directory.

    Attributes:
        vendor: Vendor the file was discovered for.
        version_token: Raw ``v([0-9.]+)`` capture from the name, or None.
        path: Absolute path to the file.
        stage: Stage directory the file was found in.
    """

    vendor: str
    version_token: str | None
    path: Path
    stage: Stage

    @property
    def name(self) -> str:
        return self.path.name


def vendor_glob(pattern: str, vendor: str) -> str:
    """Expand a filename pattern template into a case-insensitive glob.

    Every letter of the vendor becomes a ``[xX]`` class and glob
    metacharacters in the vendor are escaped, so ``{vendor}_Driver_v*.exe``
    with vendor "Amd" yields ``[aA][mM][dD]_Driver_v*.exe``.
    """
    parts: list[str] = []
    for ch in vendor:
        if ch.isalpha() and ch.lower() != ch.upper():
            parts.append(f"[{ch.lower()}{ch.upper()}]")
        elif ch in "*?[":
            parts.append(f"[{ch}]")
        else:
            parts.append(ch)
    return pattern.replace("{vendor}", "".join(parts))


class DriverRepository:
    """Discovers driver files in stage directories. Never mutates anything."""

    def __init__(
        self,
        filesystem: FileSystem | None = None,
        filename_pattern: str = DEFAULT_FILENAME_PATTERN,
        logger: Logger | None = None,
    ) -> None:
        self.filesystem = filesystem or LocalFileSystem()
        self.filename_pattern = filename_pattern
        self.logger = logger or SilentLogger()

    def list_drivers(self, stage_dir: Path, vendor: str, stage: Stage) -> list[DriverFile]:
        """List every driver for vendor in stage_dir, sorted by filename.

        Raises:
            FilesystemError: If the directory exists but cannot be listed.
        """
        glob = vendor_glob(self.filename_pattern, vendor)
        self.logger.debug("REPO", f"Listing {stage_dir} for {glob}")
        paths = self.filesystem.list_files(stage_dir, glob)
        return [
            DriverFile(
                vendor=vendor,
                version_token=extract_version_token(p.name),
                path=p.absolute(),
                stage=stage,
            )
            for p in sorted(paths, key=lambda p: p.name)
        ]

    def find_driver(self, stage_dir: Path, vendor: str, stage: Stage) -> DriverFile | None:
        """Return the single driver for vendor in stage_dir, or None.

        When several files match, the lexicographically greatest filename
        wins.
        """
        drivers = self.list_drivers(stage_dir, vendor, stage)
        if not drivers:
            self.logger.debug("REPO", f"No {vendor} driver in {stage}")
            return None
        chosen = max(drivers, key=lambda d: d.name)
        if len(drivers) > 1:
            self.logger.verbose(
                "REPO",
                f"{len(drivers)} {vendor} drivers in {stage}, using {chosen.name}",
            )
        else:
            self.logger.debug("REPO", f"Found {chosen.name} in {stage}")
        return chosen
