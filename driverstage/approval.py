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

"""Approval collaborators for driver promotions.

Before a promotion touches the filesystem the orchestrator asks an
approver to confirm it. The core treats every approver identically: a
False answer ends the vendor run as "declined".

Example:
    Automated approval (CI, scheduled tasks):
        ```python
        from driverstage.approval import AutoApprover

        approver = AutoApprover()
        approver.confirm("Promote NVIDIA 1.0 -> 2.0?")  # True
        ```

    Interactive approval:
        ```python
        from driverstage.approval import InteractiveApprover

        approver = InteractiveApprover()
        if approver.confirm("Promote NVIDIA 1.0 -> 2.0?"):
            ...
        ```
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Protocol

from driverstage.logging import CONSOLE_LOCK

_YES = {"y", "yes"}


class Approver(Protocol):
    """Protocol for approval implementations."""

    def confirm(self, prompt: str) -> bool:
        """Return True if the described promotion may proceed."""
        ...


class AutoApprover:
    """Answers every prompt with a fixed decision."""

    def __init__(self, approve: bool = True) -> None:
        self.approve = approve

    def confirm(self, prompt: str) -> bool:
        return self.approve


class InteractiveApprover:
    """Asks a y/N question on the terminal.

    Vendor runs happen on worker threads; prompts are serialized so two
    vendors never interleave their questions. The lock defaults to the
    console lock DefaultLogger writes under, so log lines from other
    vendors wait until the question is answered. Anything other than "y"
    or "yes" (case-insensitive), including end of input, is a refusal.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] | None = None,
        lock: AbstractContextManager | None = None,
    ) -> None:
        self._input = input_func or input
        self._lock = lock or CONSOLE_LOCK

    def confirm(self, prompt: str) -> bool:
        with self._lock:
            try:
                answer = self._input(f"{prompt} [y/N] ")
            except EOFError:
                return False
        return answer.strip().lower() in _YES
