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

"""Configuration loading for driverstage.

The configuration file is YAML (JSON files load too, since JSON is valid
YAML). Built-in defaults are deep-merged underneath the file, so a minimal
configuration only names the base path and the vendors:

    base_path: C:/Drivers
    vendors: [NVIDIA, AMD, Intel]

Merge Behavior:
    The loader performs deep merging with "last wins" semantics:
      - **Dicts**: Recursively merged (keys from the file override defaults)
      - **Lists**: Completely replaced (NOT appended/extended)
      - **Scalars**: Overwritten

Path Resolution:
    Relative paths are resolved against the CONFIG FILE location, not the
    working directory:
      - base_path
      - history_file

Error Handling:
    Every problem raises ConfigError, chained with "from err" where an
    underlying exception exists. Configuration is consumed once at startup
    and returned as an immutable DriverStageConfig.

Example:
    from pathlib import Path
    from driverstage.config import load_config

    config = load_config(Path("driverstage.yaml"))
    print(config.stages.active)
    print(config.vendors)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from driverstage.exceptions import ConfigError
from driverstage.logging import Logger, SilentLogger
from driverstage.repository import (
    DEFAULT_FILENAME_PATTERN,
    DEFAULT_STAGE_FOLDERS,
    STAGE_NAMES,
    StageSet,
)

DEFAULTS: dict[str, Any] = {
    "stages": dict(DEFAULT_STAGE_FOLDERS),
    "filename_pattern": DEFAULT_FILENAME_PATTERN,
    "auto_approve": False,
    "max_workers": 4,
    "rescan": {"command": None, "timeout": 60},
    "history_file": None,
}

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class DriverStageConfig:
    """Immutable run configuration.

    Attributes:
        base_path: Absolute directory holding the four stage folders.
        stages: Resolved stage directories.
        vendors: Vendor identifiers, in processing/report order.
        filename_pattern: Template containing ``{vendor}``.
        auto_approve: Approve promotions without prompting.
        max_workers: Number of vendors processed in parallel.
        rescan_command: Command run after a successful promotion, or None.
        rescan_timeout: Seconds allowed for the rescan command.
        history_file: JSON file receiving run records, or None.
        source: The file the configuration was loaded from.
    """

    base_path: Path
    stages: StageSet
    vendors: tuple[str, ...]
    filename_pattern: str = DEFAULT_FILENAME_PATTERN
    auto_approve: bool = False
    max_workers: int = 4
    rescan_command: tuple[str, ...] | None = None
    rescan_timeout: float = 60.0
    history_file: Path | None = None
    source: Path | None = None


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      ConfigError - when the file is missing, unreadable, invalid or empty
    """
    if not p.exists():
        raise ConfigError(f"config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"error parsing YAML: {p}: {err}") from err
    except OSError as err:
        raise ConfigError(f"cannot read config file: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"config file is empty: {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            result[k] = v
    return result


# -------------------------------
# Validation helpers
# -------------------------------


def _resolve_path(raw: Any, config_dir: Path, field_name: str) -> Path:
    if not isinstance(raw, str | Path) or not str(raw).strip():
        raise ConfigError(f"'{field_name}' must be a non-empty path")
    p = Path(raw).expanduser()
    if not p.is_absolute():
        p = config_dir / p
    return p.resolve()


def _vendors(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list) or not raw:
        raise ConfigError("'vendors' must be a non-empty list of vendor names")
    vendors: list[str] = []
    for v in raw:
        if not isinstance(v, str) or not v.strip():
            raise ConfigError(f"invalid vendor entry: {v!r}")
        name = v.strip()
        if name.lower() in (x.lower() for x in vendors):
            raise ConfigError(f"duplicate vendor: {name!r}")
        vendors.append(name)
    return tuple(vendors)


def _stage_folders(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        raise ConfigError("'stages' must be a mapping of stage -> folder name")
    unknown = set(raw) - set(STAGE_NAMES)
    if unknown:
        raise ConfigError(f"unknown stage(s) in 'stages': {', '.join(sorted(unknown))}")
    folders: dict[str, str] = {}
    for stage in STAGE_NAMES:
        name = raw.get(stage)
        if not isinstance(name, str) or not name.strip():
            raise ConfigError(f"missing folder name for stage '{stage}'")
        folders[stage] = name.strip()
    if len({f.lower() for f in folders.values()}) != len(folders):
        raise ConfigError("stage folder names must be distinct")
    return folders


def _rescan_command(raw: Any) -> tuple[str, ...] | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return tuple(raw.split()) or None
    if isinstance(raw, list) and all(isinstance(x, str) for x in raw):
        return tuple(raw) or None
    raise ConfigError("'rescan.command' must be a string or a list of strings")


# -------------------------------
# Public API
# -------------------------------


def build_config(
    data: dict[str, Any], config_dir: Path, source: Path | None = None
) -> DriverStageConfig:
    """Validate a raw configuration mapping and build a DriverStageConfig.

    Args:
        data: Parsed configuration (before defaults are merged).
        config_dir: Directory relative paths are resolved against.
        source: Optional path of the file the mapping came from.

    Returns:
        The immutable configuration.

    Raises:
        ConfigError: On any missing or invalid field.
    """
    merged = _deep_merge_dicts(DEFAULTS, data)

    if "base_path" not in merged:
        raise ConfigError("missing required field 'base_path'")
    base_path = _resolve_path(merged["base_path"], config_dir, "base_path")

    stages = StageSet.from_base(base_path, _stage_folders(merged["stages"]))
    vendors = _vendors(merged.get("vendors"))

    pattern = merged["filename_pattern"]
    if not isinstance(pattern, str) or "{vendor}" not in pattern:
        raise ConfigError("'filename_pattern' must contain the '{vendor}' placeholder")

    max_workers = merged["max_workers"]
    if (
        isinstance(max_workers, bool)
        or not isinstance(max_workers, int)
        or max_workers < 1
    ):
        raise ConfigError(
            f"'max_workers' must be a positive integer, got {max_workers!r}"
        )

    rescan = merged["rescan"]
    if not isinstance(rescan, dict):
        raise ConfigError("'rescan' must be a mapping")
    timeout = rescan.get("timeout", 60)
    if isinstance(timeout, bool) or not isinstance(timeout, int | float) or timeout <= 0:
        raise ConfigError(f"'rescan.timeout' must be a positive number, got {timeout!r}")

    history = merged["history_file"]
    history_file = (
        _resolve_path(history, config_dir, "history_file") if history else None
    )

    return DriverStageConfig(
        base_path=base_path,
        stages=stages,
        vendors=vendors,
        filename_pattern=pattern,
        auto_approve=bool(merged["auto_approve"]),
        max_workers=max_workers,
        rescan_command=_rescan_command(rescan.get("command")),
        rescan_timeout=float(timeout),
        history_file=history_file,
        source=source,
    )


def load_config(config_path: Path, *, logger: Logger | None = None) -> DriverStageConfig:
    """
    Load the driverstage configuration file.

    Steps
      1) Read the YAML (or JSON) file.
      2) Merge it over the built-in defaults.
      3) Resolve base_path and history_file against the file's directory.
      4) Validate every field.

    Returns
      An immutable DriverStageConfig.

    Raises
      ConfigError on a missing file, parse errors or invalid fields.
    """
    logger = logger or SilentLogger()
    config_path = Path(config_path).resolve()
    logger.verbose("CONFIG", f"Loading config: {config_path}")

    data = _load_yaml_file(config_path)
    if not isinstance(data, dict):
        raise ConfigError(f"top-level YAML must be a mapping (dict): {config_path}")

    config = build_config(data, config_path.parent, source=config_path)

    logger.verbose("CONFIG", f"Base path: {config.base_path}")
    logger.verbose("CONFIG", f"Vendors: {', '.join(config.vendors)}")
    logger.debug("CONFIG", f"Filename pattern: {config.filename_pattern}")
    for stage, path in config.stages.items():
        logger.debug("CONFIG", f"  {stage}: {path}")
    return config
