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

"""driverstage - staged device driver promotion

A Python CLI and library for managing device driver binaries across a
four-stage folder lifecycle:

    Native  -> factory baseline, never modified
    Active  -> the installed driver per vendor
    New     -> inbound candidates
    Archive -> superseded drivers kept for rollback

driverstage provides:

- Version parsing from ``{Vendor}_Driver_v{X.Y.Z}.exe`` filenames
- A pure "newer wins" promotion policy
- Two-step promotion (Active -> Archive, New -> Active) with Archive as
  the recovery point
- Native seeding of an empty Active folder (copy, never move)
- Interactive or automatic approval and an optional device rescan command
- Parallel, isolated per-vendor runs

Quick Start:
Create the stage folders:

    $ driverstage init driverstage.yaml

Show what each stage holds:

    $ driverstage status driverstage.yaml

Promote newer drivers without prompting:

    $ driverstage run driverstage.yaml --yes

For more details, see the individual module docstrings.
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Staged device driver promotion with archive rollback"

# Re-export commonly used functions for convenience
from driverstage.config import DriverStageConfig, load_config
from driverstage.core import UpdateOrchestrator, run_update
from driverstage.exceptions import (
    ConfigError,
    DriverStageError,
    FilesystemError,
    InvalidVersionError,
)
from driverstage.policy import should_promote
from driverstage.results import PromotionRecord, RunResult, SeedRecord, VendorResult
from driverstage.versioning import Version, compare_versions, parse_version

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "ConfigError",
    "DriverStageConfig",
    "DriverStageError",
    "FilesystemError",
    "InvalidVersionError",
    "PromotionRecord",
    "RunResult",
    "SeedRecord",
    "UpdateOrchestrator",
    "VendorResult",
    "Version",
    "compare_versions",
    "load_config",
    "parse_version",
    "run_update",
    "should_promote",
]
