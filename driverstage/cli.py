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

"""Command-line interface for driverstage.

Commands:

    init: Create the four stage directories
    status: Show which driver each stage holds per vendor
    run: Promote newer drivers from New to Active

Example:
    Create the stage folders:
        ```bash
        $ driverstage init driverstage.yaml
        ```

    Show the current layout:
        ```bash
        $ driverstage status driverstage.yaml
        ```

    Promote without prompting, NVIDIA only:
        ```bash
        $ driverstage run driverstage.yaml --yes --vendor NVIDIA
        ```

    Enable verbose output:
        ```bash
        $ driverstage run driverstage.yaml --verbose
        ```

Exit Codes:

- 0: Success (no vendor failed)
- 1: Error (configuration problem or at least one vendor failed)

Note:
    The CLI uses argparse for command parsing (stdlib, zero dependencies).
    Each command has its own handler function (cmd_<command>).
    Verbose mode shows full tracebacks on errors for debugging.

"""

from __future__ import annotations

import argparse
from datetime import UTC, datetime
from pathlib import Path
import sys
import traceback

from driverstage import __version__
from driverstage.approval import AutoApprover, InteractiveApprover
from driverstage.config import load_config
from driverstage.core import UpdateOrchestrator
from driverstage.exceptions import ConfigError, DriverStageError
from driverstage.logging import get_logger
from driverstage.repository import DriverRepository
from driverstage.state import append_run


def _print_error(err: Exception, args: argparse.Namespace) -> None:
    print(f"Error: {err}")
    if args.verbose or args.debug:
        traceback.print_exc()


def cmd_init(args: argparse.Namespace) -> int:
    """Handler for 'driverstage init' command.

    Creates any missing stage directories under the configured base path.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    try:
        config = load_config(Path(args.config), logger=logger)
        created = config.stages.ensure()
    except (DriverStageError, OSError) as err:
        _print_error(err, args)
        return 1

    for stage, path in config.stages.items():
        marker = "created" if path in created else "exists"
        print(f"  {stage:<8} {path} ({marker})")
    print()
    print("[SUCCESS] Stage directories ready.")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Handler for 'driverstage status' command.

    Shows, per vendor, the driver selected in Native, Active and New and the
    number of archived drivers. Read-only.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    try:
        config = load_config(Path(args.config), logger=logger)
        repo = DriverRepository(filename_pattern=config.filename_pattern, logger=logger)
        stages = config.stages

        print("=" * 70)
        print("DRIVER STATUS")
        print("=" * 70)
        print(f"{'Vendor':<12} {'Native':<12} {'Active':<12} {'New':<12} {'Archived':>8}")
        print("-" * 70)
        for vendor in config.vendors:
            cells = []
            for stage in ("native", "active", "new"):
                driver = repo.find_driver(stages.path_for(stage), vendor, stage)
                if driver is None:
                    cells.append("-")
                else:
                    cells.append((driver.version_token or "?").strip("."))
            archived = len(repo.list_drivers(stages.archive, vendor, "archive"))
            print(f"{vendor:<12} {cells[0]:<12} {cells[1]:<12} {cells[2]:<12} {archived:>8}")
        print("=" * 70)
    except (DriverStageError, OSError) as err:
        _print_error(err, args)
        return 1
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Handler for 'driverstage run' command.

    Runs the update workflow for every configured vendor (or those given
    with --vendor), prints a results table and optionally appends the run
    to a history file.

    Returns:
        Exit code (0 when no vendor failed, 1 otherwise).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    try:
        config = load_config(Path(args.config), logger=logger)
        if args.yes or config.auto_approve:
            approver = AutoApprover()
        else:
            approver = InteractiveApprover()
        orchestrator = UpdateOrchestrator(config, approver=approver, logger=logger)
        started = datetime.now(UTC)
        result = orchestrator.run(args.vendor or None)
    except ConfigError as err:
        _print_error(err, args)
        return 1
    except DriverStageError as err:
        # Catch any other driverstage errors we might have missed
        _print_error(err, args)
        return 1

    print("=" * 70)
    print("RUN RESULTS")
    print("=" * 70)
    for vendor_result in result.vendors:
        record = vendor_result.record
        if vendor_result.seed is not None:
            print(f"{record.vendor:<12} SEEDED     {vendor_result.seed.destination.name}")
        print(f"{record.vendor:<12} {record.result.upper():<10} {record.reason}")
    print("=" * 70)

    history_file = args.history_file or config.history_file
    if history_file:
        try:
            append_run(Path(history_file), result, started=started)
            logger.verbose("HISTORY", f"Appended run to {history_file}")
        except DriverStageError as err:
            print(f"Warning: could not write history: {err}")

    if result.ok:
        print()
        print("[SUCCESS] All vendors processed.")
        return 0
    print()
    print(f"[FAILED] {len(result.failed)} vendor(s) failed.")
    return 1


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "config",
        help="Path to the driverstage YAML configuration file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands registered."""
    parser = argparse.ArgumentParser(
        prog="driverstage",
        description="driverstage - staged device driver promotion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"driverstage {__version__}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'init' command
    parser_init = subparsers.add_parser(
        "init",
        help="Create the Native/Active/New/Archive directories",
        description="Create any missing stage directories under the configured base path.",
    )
    _add_common_flags(parser_init)
    parser_init.set_defaults(func=cmd_init)

    # 'status' command
    parser_status = subparsers.add_parser(
        "status",
        help="Show the driver held in each stage per vendor",
        description="List the selected driver version per stage for each vendor (read-only).",
    )
    _add_common_flags(parser_status)
    parser_status.set_defaults(func=cmd_status)

    # 'run' command
    parser_run = subparsers.add_parser(
        "run",
        help="Promote newer drivers from New to Active",
        description="Archive the Active driver and install a newer New candidate, per vendor.",
    )
    _add_common_flags(parser_run)
    parser_run.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Approve every promotion without prompting",
    )
    parser_run.add_argument(
        "--vendor",
        action="append",
        default=[],
        help="Only process this vendor (repeatable)",
    )
    parser_run.add_argument(
        "--history-file",
        type=Path,
        default=None,
        help="Append run records to this JSON file (default: from config)",
    )
    parser_run.set_defaults(func=cmd_run)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the driverstage CLI.

    This function is registered as the 'driverstage' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
