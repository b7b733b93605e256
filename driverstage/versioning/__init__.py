"""
Driver version parsing and comparison for driverstage.

Driver binaries carry their version in the filename
(``NVIDIA_Driver_v2.0.1.exe``). This package extracts that version and
defines a strict numeric ordering over it.

Modules
-------
keys : module
    Version extraction from filenames and numeric comparison.

Public API
----------
Version : dataclass
    Comparable tuple of non-negative integers.
parse_version : function
    Parse the version from a driver filename (raises InvalidVersionError).
extract_version_token : function
    Return the raw ``v([0-9.]+)`` capture, or None.
compare_versions : function
    Compare two versions, returning -1, 0, or 1.
is_newer : function
    Check whether a candidate beats the current version (or None).

Examples
--------
    >>> from driverstage.versioning import parse_version, compare_versions
    >>> compare_versions(parse_version("A_Driver_v1.10.exe"),
    ...                  parse_version("A_Driver_v1.2.exe"))
    1

Notes
-----
- Comparison is numeric per component: 1.2 < 1.10
- Missing trailing components are zero: 1.0 == 1.0.0
- A filename without a version is an error, never "version 0"
"""

from .keys import (
    Version,
    compare_versions,
    extract_version_token,
    is_newer,
    parse_version,
)

__all__ = [
    "Version",
    "compare_versions",
    "extract_version_token",
    "is_newer",
    "parse_version",
]
