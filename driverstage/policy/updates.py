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

"""Promotion decision policy for driverstage.

Determines whether a candidate driver waiting in New should replace the
current Active driver. The decision is a pure function of the two versions;
all filesystem mutation lives in the executor.

Example:
    Check if a candidate should be promoted:

        from driverstage.policy.updates import should_promote
        from driverstage.versioning import parse_version

        decision = should_promote(
            parse_version("NVIDIA_Driver_v1.0.exe"),
            parse_version("NVIDIA_Driver_v2.0.exe"),
        )  # True

"""

from __future__ import annotations

from driverstage.versioning import Version, is_newer


def should_promote(current_version: Version | None, candidate_version: Version) -> bool:
    """Decide whether a candidate driver should be promoted.

    Args:
        current_version: Version of the Active (or seeded Native) driver, or
            None when the vendor has no driver at all.
        candidate_version: Version of the driver waiting in New.

    Returns:
        True when there is no current driver (bootstrap) or the candidate is
        strictly newer. Equal or older candidates are never promoted, so
        repeated runs against an unchanged New folder are no-ops.

    """
    return is_newer(candidate_version, current_version)
