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

"""Logging interface for driverstage.

Library modules never print directly; they receive a logger instance and
call it. The CLI builds one with the requested verbosity and passes it to
the orchestrator, which hands it down to every component.

The logger supports three output levels:
- Step: Always printed (for progress indicators)
- Verbose: Only printed when verbose mode is enabled
- Debug: Only printed when debug mode is enabled (implies verbose)

Example:
    Inject a logger:
        ```python
        from driverstage.logging import get_logger

        logger = get_logger(verbose=True)
        logger.step(1, 3, "Resolving current driver...")
        logger.verbose("REPO", "Found NVIDIA_Driver_v1.0.exe in Active")
        ```

    Use with dependency injection:

        def my_function(logger=None):
            if logger is None:
                logger = SilentLogger()
            logger.verbose("MODULE", "Processing...")

Note:
    Vendor runs execute on worker threads, so DefaultLogger writes each
    line under CONSOLE_LOCK to keep lines from different vendors whole.
    InteractiveApprover holds the same lock while a prompt is open, so no
    log line lands in the middle of a question.
"""

from __future__ import annotations

import threading
from typing import Protocol

# Guards terminal output shared by loggers and interactive prompts.
CONSOLE_LOCK = threading.RLock()


class Logger(Protocol):
    """Protocol for logger implementations."""

    def step(self, step: int, total: int, message: str) -> None:
        """Print a step indicator.

        Args:
            step: Current step number (1-based).
            total: Total number of steps.
            message: Step description.
        """
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message.

        Args:
            prefix: Message prefix (e.g., "PROMOTE", "SEED").
            message: Log message.
        """
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message.

        Args:
            prefix: Message prefix (e.g., "REPO", "POLICY").
            message: Log message.
        """
        ...


class DefaultLogger:
    """Default logger implementation that prints to stdout.

    This logger respects verbose and debug flags and formats output
    consistently with the CLI output format.
    """

    def __init__(self, verbose: bool = False, debug: bool = False) -> None:
        """Initialize logger with verbosity settings.

        Args:
            verbose: If True, print verbose messages.
            debug: If True, print debug messages (implies verbose).
        """
        self._verbose = verbose or debug
        self._debug = debug
        self._lock = CONSOLE_LOCK

    def _emit(self, line: str) -> None:
        with self._lock:
            print(line, flush=True)

    def step(self, step: int, total: int, message: str) -> None:
        """Print a step indicator."""
        self._emit(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        """Print a verbose log message (only when verbose mode is active)."""
        if self._verbose:
            self._emit(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        """Print a debug log message (only when debug mode is active)."""
        if self._debug:
            self._emit(f"[{prefix}] {message}")


class SilentLogger:
    """Logger that suppresses all output.

    The default for library usage and tests.
    """

    def step(self, step: int, total: int, message: str) -> None:
        """Suppress step output."""
        pass

    def verbose(self, prefix: str, message: str) -> None:
        """Suppress verbose output."""
        pass

    def debug(self, prefix: str, message: str) -> None:
        """Suppress debug output."""
        pass


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Get a logger instance with specified verbosity.

    Args:
        verbose: If True, logger will print verbose messages.
        debug: If True, logger will print debug messages (implies verbose).

    Returns:
        A logger instance configured with the specified verbosity.

    Example:
        Get a debug logger:
            ```python
            logger = get_logger(debug=True)
            logger.debug("REPO", "Listing New/...")
            ```
    """
    return DefaultLogger(verbose=verbose, debug=debug)
