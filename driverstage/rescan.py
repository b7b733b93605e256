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

"""Device rescan collaborators.

After a fully successful promotion the executor tells the operating system
to rescan for devices so the new driver is picked up. The notification is
fire-and-forget: callers log failures and never let them change the
promotion outcome.

On Windows the usual command is ``pnputil /scan-devices``.
"""

from __future__ import annotations

import subprocess
from typing import Protocol

from driverstage.logging import Logger, SilentLogger


class Rescanner(Protocol):
    """Protocol for device rescan notifications."""

    def notify_driver_installed(self) -> None:
        """Ask the OS to pick up a newly installed driver."""
        ...


class NullRescanner:
    """Rescanner that does nothing (no rescan command configured)."""

    def notify_driver_installed(self) -> None:
        pass


class CommandRescanner:
    """Runs an external command to trigger a device rescan.

    Args:
        command: Argument vector, e.g. ["pnputil", "/scan-devices"].
        timeout: Seconds to wait for the command.
        logger: Logger for command output.

    Raises (from notify_driver_installed):
        OSError: If the command cannot be started.
        subprocess.SubprocessError: On timeout or non-zero exit.
    """

    def __init__(
        self,
        command: list[str],
        timeout: float = 60.0,
        logger: Logger | None = None,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout
        self.logger = logger or SilentLogger()

    def notify_driver_installed(self) -> None:
        self.logger.verbose("RESCAN", f"Running: {' '.join(self.command)}")
        completed = subprocess.run(
            self.command,
            capture_output=True,
            text=True,
            timeout=self.timeout,
            check=True,
        )
        if completed.stdout.strip():
            self.logger.debug("RESCAN", completed.stdout.strip())
