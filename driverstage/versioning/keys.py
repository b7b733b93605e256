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

"""Driver version parsing and comparison for driverstage.

This module is filesystem-agnostic: it does NOT list or read files.
It only extracts the version token from a driver filename and compares
the resulting integer tuples.

Driver files follow the naming convention ``{Vendor}_Driver_v{X.Y.Z}.exe``.
The version is the first match of ``v([0-9.]+)`` in the filename.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import functools
from pathlib import Path
import re

from driverstage.exceptions import InvalidVersionError

_VERSION_RE = re.compile(r"v([0-9.]+)")


def _pad_equal(
    a: tuple[int, ...], b: tuple[int, ...]
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """Pad tuples with zeros so they align for element-wise comparison."""
    n = max(len(a), len(b))
    return a + (0,) * (n - len(a)), b + (0,) * (n - len(b))


def _normalized(nums: tuple[int, ...]) -> tuple[int, ...]:
    """Drop trailing zeros so 1.0 and 1.0.0 share a hash."""
    end = len(nums)
    while end > 1 and nums[end - 1] == 0:
        end -= 1
    return nums[:end]


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A numeric driver version.

    Attributes:
        components: Non-negative integer components, left to right.
        raw: The dotted text the version was parsed from.

    Comparison is purely numeric and component-wise. Missing trailing
    components count as 0, so ``1.0 == 1.0.0`` and ``1.2 < 1.10``.
    """

    components: tuple[int, ...]
    raw: str = field(default="", compare=False)

    @classmethod
    def from_string(cls, text: str) -> Version:
        """Build a Version from a dotted string like "1.2.3".

        Leading and trailing dots are ignored ("1.0." -> 1.0). Empty inner
        components ("1..2") and non-numeric parts are rejected.

        Raises:
            InvalidVersionError: If text is not a dotted integer sequence.
        """
        core = text.strip(".")
        if not core:
            raise InvalidVersionError(text, f"empty version token {text!r}")
        parts = core.split(".")
        if any(not (p.isascii() and p.isdigit()) for p in parts):
            raise InvalidVersionError(text, f"malformed version token {text!r}")
        return cls(tuple(int(p) for p in parts), core)

    def __str__(self) -> str:
        return self.raw or ".".join(str(n) for n in self.components)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return compare_versions(self, other) < 0

    def __hash__(self) -> int:
        return hash(_normalized(self.components))


def extract_version_token(filename: str | Path) -> str | None:
    """Return the raw text captured by ``v([0-9.]+)`` in a filename.

    Only the basename is inspected. No validation is done beyond the regex;
    use parse_version() for a comparable Version.

    Example:
        ```python
        extract_version_token("NVIDIA_Driver_v2.0.exe")  # "2.0."
        extract_version_token("NVIDIA_Driver_vX.exe")    # None
        ```
    """
    m = _VERSION_RE.search(Path(filename).name)
    return m.group(1) if m else None


def parse_version(filename: str | Path) -> Version:
    """Parse the driver version out of a filename.

    Args:
        filename: A driver filename or path. Only the basename is used.

    Returns:
        The parsed Version.

    Raises:
        InvalidVersionError: If the filename has no ``v<digits-and-dots>``
            fragment or the fragment is not a valid dotted integer sequence.

    Example:
        ```python
        parse_version("Intel_Driver_v3.1.exe")  # Version((3, 1))
        ```
    """
    name = Path(filename).name
    token = extract_version_token(name)
    if token is None:
        raise InvalidVersionError(name)
    try:
        return Version.from_string(token)
    except InvalidVersionError as err:
        raise InvalidVersionError(name, f"{err} in filename {name!r}") from err


def compare_versions(a: Version, b: Version) -> int:
    """Compare two versions.

    Returns -1 if a < b, 0 if equal, 1 if a > b. The shorter tuple is
    zero-padded before the lexicographic integer comparison.
    """
    aa, bb = _pad_equal(a.components, b.components)
    return (aa > bb) - (aa < bb)


def is_newer(candidate: Version, current: Version | None) -> bool:
    """Return True iff candidate > current (any version beats None)."""
    if current is None:
        return True
    return compare_versions(candidate, current) > 0
