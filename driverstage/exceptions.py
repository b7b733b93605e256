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

"""Exception hierarchy for driverstage.

This module defines a custom exception hierarchy that allows library users
to distinguish between the failure modes of a driver update run:

- ConfigError: Configuration problems (missing file, YAML parse errors,
  missing base path or vendor list, missing stage directories)
- InvalidVersionError: A driver filename carries no parseable version
- FilesystemError: A move or copy between stage directories failed

All exceptions inherit from DriverStageError, allowing users to catch all
driverstage errors with a single except clause if needed.

"No candidate" and "approval declined" are normal outcomes of a vendor run
and are reported through PromotionRecord.result, not raised.

Example:
    Catching specific error types:
        ```python
        from pathlib import Path
        from driverstage.core import run_update
        from driverstage.exceptions import ConfigError

        try:
            result = run_update(Path("driverstage.yaml"))
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "DriverStageError",
    "ConfigError",
    "InvalidVersionError",
    "FilesystemError",
]


class DriverStageError(Exception):
    """Base exception for all driverstage errors.

    All driverstage-specific exceptions inherit from this class, allowing
    users to catch all of them with a single except clause if needed.
    """

    pass


class ConfigError(DriverStageError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - Missing configuration files
    - YAML parsing (syntax errors, invalid structure)
    - Missing or invalid fields (base_path, vendors, filename_pattern)
    - Stage directories that do not exist when a run starts

    A ConfigError is fatal at startup: the run cannot begin without the four
    resolved stage paths.
    """

    pass


class InvalidVersionError(DriverStageError):
    """Raised when a driver filename has no parseable version.

    An unversionable driver must never be treated as "version 0"; this
    error blocks the promotion decision for that vendor instead.

    Attributes:
        filename: The filename that failed to parse.
    """

    def __init__(self, filename: str, message: str | None = None) -> None:
        self.filename = filename
        super().__init__(message or f"no parseable version in filename {filename!r}")


class FilesystemError(DriverStageError):
    """Raised when a stage transition on disk fails.

    Wraps the underlying OSError (available as __cause__) and records the
    operation that failed.

    Attributes:
        operation: "move", "copy" or "list".
        src: Source path of the operation.
        dst: Destination path (None for listings).
    """

    def __init__(
        self,
        operation: str,
        src: object,
        dst: object | None = None,
        message: str | None = None,
    ) -> None:
        self.operation = operation
        self.src = src
        self.dst = dst
        if message is None:
            if dst is None:
                message = f"{operation} failed for {src}"
            else:
                message = f"{operation} failed: {src} -> {dst}"
        super().__init__(message)
