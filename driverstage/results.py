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

"""Public API return types for driverstage.

This module defines dataclasses for the outcome of a driver update run.
All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from driverstage.core import run_update

        result = run_update(Path("driverstage.yaml"))
        for vendor_result in result.vendors:
            record = vendor_result.record
            print(record.vendor, record.result, record.reason)
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like Version or DriverFile) remain co-located with their related logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

from driverstage.versioning import Version

Outcome = Literal["promoted", "skipped", "failed", "declined"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class PromotionRecord:
    """Outcome of one vendor's promotion attempt.

    Attributes:
        vendor: Vendor identifier from configuration.
        result: "promoted", "skipped", "failed" or "declined".
        from_version: Version of the driver being replaced (None if none).
        to_version: Version of the candidate (None if no candidate or it
            could not be parsed).
        reason: Human-readable explanation of the outcome.
        error: The exception behind a "failed" result, if any.
        archived_path: Where the previous Active driver was archived.
        installed_path: Where the candidate now lives in Active.
        timestamp: When the record was created (UTC).
    """

    vendor: str
    result: Outcome
    from_version: Version | None = None
    to_version: Version | None = None
    reason: str = ""
    error: BaseException | None = None
    archived_path: Path | None = None
    installed_path: Path | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def ok(self) -> bool:
        """True for every outcome except "failed"."""
        return self.result != "failed"


@dataclass(frozen=True)
class SeedRecord:
    """A Native driver copied into an empty Active folder.

    Seeding is not a promotion: nothing is archived and Native is left
    untouched as the factory fallback.

    Attributes:
        vendor: Vendor identifier.
        version: Version of the seeded driver (None if its name had none).
        source: Path of the Native driver.
        destination: Path of the copy in Active.
        timestamp: When the copy completed (UTC).
    """

    vendor: str
    version: Version | None
    source: Path
    destination: Path
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class VendorResult:
    """Everything one vendor run produced.

    Attributes:
        record: The promotion outcome.
        seed: The Native seed event, if Active had to be seeded.
    """

    record: PromotionRecord
    seed: SeedRecord | None = None

    @property
    def vendor(self) -> str:
        return self.record.vendor


@dataclass(frozen=True)
class RunResult:
    """Results of a full run, one entry per vendor in configuration order.

    Attributes:
        vendors: Per-vendor results.
    """

    vendors: list[VendorResult]

    @property
    def records(self) -> list[PromotionRecord]:
        return [v.record for v in self.vendors]

    @property
    def failed(self) -> list[PromotionRecord]:
        return [r for r in self.records if r.result == "failed"]

    @property
    def ok(self) -> bool:
        return not self.failed
