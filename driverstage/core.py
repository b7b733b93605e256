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

"""Core orchestration for driverstage.

This module drives the per-vendor update workflow:

    Start -> ResolveCurrent -> ResolveCandidate -> Decide
          -> {Promote | Skip | Decline} -> Done

- **ResolveCurrent**: the driver in Active. When Active is empty the Native
    driver is COPIED (never moved) into Active as a seed, so Native stays the
    factory fallback. A failed seed copy fails the vendor closed.
- **ResolveCandidate**: the driver in New. None means "skipped".
- **Decide**: both versions are parsed (a parse failure fails the vendor)
    and the promotion policy is consulted.
- **Promote**: after the approver confirms, the executor archives the
    current driver and installs the candidate.

Design Principles:

- Vendors are independent: each runs on its own worker thread and a failure
  in one never stops the others
- Steps inside one vendor run are strictly sequential
- No state survives a run except the stage folders themselves
- Configuration and collaborators are injected; there are no globals

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from driverstage.approval import AutoApprover
        from driverstage.config import load_config
        from driverstage.core import UpdateOrchestrator

        config = load_config(Path("driverstage.yaml"))
        orchestrator = UpdateOrchestrator(config, approver=AutoApprover())
        result = orchestrator.run()
        for record in result.records:
            print(record.vendor, record.result, record.reason)
        ```

"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from driverstage.approval import Approver, AutoApprover, InteractiveApprover
from driverstage.config import DriverStageConfig, load_config
from driverstage.exceptions import ConfigError, DriverStageError
from driverstage.executor import PromotionExecutor
from driverstage.io import FileSystem, LocalFileSystem
from driverstage.logging import Logger, SilentLogger
from driverstage.policy import should_promote
from driverstage.repository import DriverFile, DriverRepository
from driverstage.rescan import CommandRescanner, NullRescanner, Rescanner
from driverstage.results import PromotionRecord, RunResult, SeedRecord, VendorResult
from driverstage.versioning import Version, parse_version


def _failed(
    vendor: str,
    err: BaseException,
    reason: str,
    from_version: Version | None = None,
    to_version: Version | None = None,
) -> PromotionRecord:
    return PromotionRecord(
        vendor=vendor,
        result="failed",
        from_version=from_version,
        to_version=to_version,
        reason=reason,
        error=err,
    )


class UpdateOrchestrator:
    """Runs the update workflow for each configured vendor.

    Attributes:
        config: Immutable run configuration.
        repository: Read-only stage directory view.
        executor: Performs promotions.
        approver: Confirms promotions before they happen.
    """

    def __init__(
        self,
        config: DriverStageConfig,
        *,
        filesystem: FileSystem | None = None,
        approver: Approver | None = None,
        rescanner: Rescanner | None = None,
        logger: Logger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or SilentLogger()
        self.filesystem = filesystem or LocalFileSystem()

        if approver is None:
            approver = AutoApprover() if config.auto_approve else InteractiveApprover()
        self.approver = approver

        if rescanner is None:
            if config.rescan_command:
                rescanner = CommandRescanner(
                    list(config.rescan_command),
                    timeout=config.rescan_timeout,
                    logger=self.logger,
                )
            else:
                rescanner = NullRescanner()

        self.repository = DriverRepository(
            self.filesystem, config.filename_pattern, self.logger
        )
        self.executor = PromotionExecutor(
            config.stages, self.filesystem, rescanner, self.logger
        )

    # -------------------------------
    # Single vendor
    # -------------------------------

    def _resolve_current(self, vendor: str) -> tuple[DriverFile | None, SeedRecord | None]:
        stages = self.config.stages
        current = self.repository.find_driver(stages.active, vendor, "active")
        if current is not None:
            self.logger.verbose("RUN", f"{vendor}: current driver {current.name}")
            return current, None

        native = self.repository.find_driver(stages.native, vendor, "native")
        if native is None:
            self.logger.verbose("RUN", f"{vendor}: no Active or Native driver")
            return None, None

        # Copy, never move: Native stays the factory fallback.
        dest = self.filesystem.copy_file(native.path, stages.active / native.name)
        try:
            seeded_version: Version | None = parse_version(native.name)
        except DriverStageError:
            seeded_version = None
        seed = SeedRecord(
            vendor=vendor,
            version=seeded_version,
            source=native.path,
            destination=dest,
        )
        self.logger.verbose("SEED", f"{vendor}: seeded Active from Native {native.name}")
        seeded = DriverFile(
            vendor=vendor,
            version_token=native.version_token,
            path=dest.absolute(),
            stage="active",
        )
        return seeded, seed

    def run_vendor(self, vendor: str) -> VendorResult:
        """Run the full workflow for one vendor.

        Never raises for DriverStageError or OSError; those become a
        "failed" record so other vendors are unaffected.

        Returns:
            VendorResult with the promotion record and, when Active had to
            be seeded from Native, the seed record.
        """
        stages = self.config.stages

        # ResolveCurrent
        try:
            current, seed = self._resolve_current(vendor)
        except (DriverStageError, OSError) as err:
            self.logger.verbose("RUN", f"{vendor}: cannot resolve current driver: {err}")
            return VendorResult(
                _failed(vendor, err, f"could not resolve current driver: {err}")
            )

        # ResolveCandidate
        try:
            candidate = self.repository.find_driver(stages.new, vendor, "new")
        except (DriverStageError, OSError) as err:
            return VendorResult(
                _failed(vendor, err, f"could not list candidates: {err}"), seed
            )

        current_version: Version | None = None
        if candidate is None:
            try:
                current_version = parse_version(current.name) if current else None
            except DriverStageError:
                current_version = None
            self.logger.verbose("RUN", f"{vendor}: no candidate in New, skipping")
            return VendorResult(
                PromotionRecord(
                    vendor=vendor,
                    result="skipped",
                    from_version=current_version,
                    reason="no candidate",
                ),
                seed,
            )

        # Decide
        try:
            candidate_version = parse_version(candidate.name)
        except DriverStageError as err:
            self.logger.verbose("RUN", f"{vendor}: {err}")
            return VendorResult(
                _failed(vendor, err, f"invalid candidate version: {err}"), seed
            )
        if current is not None:
            try:
                current_version = parse_version(current.name)
            except DriverStageError as err:
                self.logger.verbose("RUN", f"{vendor}: {err}")
                return VendorResult(
                    _failed(
                        vendor,
                        err,
                        f"invalid current version: {err}",
                        to_version=candidate_version,
                    ),
                    seed,
                )

        if not should_promote(current_version, candidate_version):
            self.logger.verbose(
                "POLICY",
                f"{vendor}: candidate {candidate_version} is not newer than "
                f"{current_version}, skipping",
            )
            return VendorResult(
                PromotionRecord(
                    vendor=vendor,
                    result="skipped",
                    from_version=current_version,
                    to_version=candidate_version,
                    reason=f"candidate {candidate_version} not newer than {current_version}",
                ),
                seed,
            )

        # Approval
        prompt = (
            f"Promote {vendor} driver {current_version or 'none'} -> "
            f"{candidate_version} ({candidate.name})?"
        )
        if not self.approver.confirm(prompt):
            self.logger.verbose("APPROVAL", f"{vendor}: promotion declined")
            return VendorResult(
                PromotionRecord(
                    vendor=vendor,
                    result="declined",
                    from_version=current_version,
                    to_version=candidate_version,
                    reason="promotion declined",
                ),
                seed,
            )

        # Promote
        return VendorResult(self.executor.promote(vendor, current, candidate), seed)

    # -------------------------------
    # All vendors
    # -------------------------------

    def _select_vendors(self, vendors: list[str] | None) -> list[str]:
        if vendors is None:
            return list(self.config.vendors)
        known = {v.lower(): v for v in self.config.vendors}
        selected: list[str] = []
        for name in vendors:
            match = known.get(name.lower())
            if match is None:
                raise ConfigError(f"vendor not in configuration: {name!r}")
            if match not in selected:
                selected.append(match)
        return selected

    def run(self, vendors: list[str] | None = None) -> RunResult:
        """Run every configured vendor (or the given subset) in parallel.

        Args:
            vendors: Optional subset of configured vendor names
                (case-insensitive). Default: all vendors.

        Returns:
            RunResult with one VendorResult per vendor, in configuration
            order.

        Raises:
            ConfigError: If a stage directory is missing or a requested
                vendor is not configured. Raised before any vendor runs.
        """
        missing = self.config.stages.missing()
        if missing:
            raise ConfigError(
                "stage directories not found: "
                + ", ".join(str(p) for p in missing)
                + " (run 'driverstage init' to create them)"
            )
        selected = self._select_vendors(vendors)
        total = len(selected)
        results: dict[str, VendorResult] = {}

        with ThreadPoolExecutor(
            max_workers=max(1, min(self.config.max_workers, total)),
            thread_name_prefix="driverstage",
        ) as pool:
            futures = {pool.submit(self.run_vendor, vendor): vendor for vendor in selected}
            for done, future in enumerate(as_completed(futures), start=1):
                vendor = futures[future]
                try:
                    vendor_result = future.result()
                except Exception as err:
                    # Isolate unexpected errors to their vendor.
                    vendor_result = VendorResult(
                        _failed(vendor, err, f"unexpected error: {err!r}")
                    )
                results[vendor] = vendor_result
                record = vendor_result.record
                self.logger.step(done, total, f"{vendor}: {record.result} ({record.reason})")

        return RunResult(vendors=[results[v] for v in selected])


def run_update(
    config_path: Path,
    *,
    vendors: list[str] | None = None,
    auto_approve: bool | None = None,
    approver: Approver | None = None,
    rescanner: Rescanner | None = None,
    logger: Logger | None = None,
) -> RunResult:
    """Load the configuration and run the update workflow.

    This is the main entry point for the 'driverstage run' command.

    Args:
        config_path: Path to the YAML configuration file.
        vendors: Optional subset of vendors to process.
        auto_approve: Override the config's auto_approve flag.
        approver: Explicit approver (wins over auto_approve).
        rescanner: Explicit rescan collaborator.
        logger: Logger to use. Default is silent.

    Returns:
        RunResult for the processed vendors.

    Raises:
        ConfigError: On configuration problems or missing stage directories.

    Example:
        ```python
        result = run_update(Path("driverstage.yaml"), auto_approve=True)
        if not result.ok:
            for record in result.failed:
                print(record.vendor, record.reason)
        ```
    """
    logger = logger or SilentLogger()
    config = load_config(config_path, logger=logger)
    if approver is None and auto_approve is not None:
        approver = AutoApprover() if auto_approve else InteractiveApprover()
    orchestrator = UpdateOrchestrator(
        config, approver=approver, rescanner=rescanner, logger=logger
    )
    return orchestrator.run(vendors)
