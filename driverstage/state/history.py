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

"""Run history file for driverstage.

The core never persists anything but the stage folders. The CLI can keep
an audit trail of every run in a JSON file:

    {
      "metadata": {"driverstage_version": "0.1.0", "schema_version": "1",
                   "last_updated": "..."},
      "runs": [
        {"started": "...", "finished": "...", "records": [...], "seeds": [...]}
      ]
    }

The history is informational only: the four stage folders stay the source
of truth and the file can be deleted at any time.
"""

from __future__ import annotations

from datetime import UTC, datetime
import json
from pathlib import Path
from typing import Any

from driverstage import __version__
from driverstage.exceptions import FilesystemError
from driverstage.results import PromotionRecord, RunResult, SeedRecord


def create_default_history() -> dict[str, Any]:
    """Create an empty history structure."""
    return {
        "metadata": {
            "driverstage_version": __version__,
            "schema_version": "1",
            "last_updated": datetime.now(UTC).isoformat(),
        },
        "runs": [],
    }


def load_history(history_file: Path) -> dict[str, Any]:
    """Load history from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        json.JSONDecodeError: If the file contains invalid JSON.
    """
    with open(history_file, encoding="utf-8") as f:
        return json.load(f)


def save_history(history: dict[str, Any], history_file: Path) -> None:
    """Save history to a JSON file with 2-space indentation and sorted keys.

    Creates parent directories if needed and adds a trailing newline.
    """
    history_file.parent.mkdir(parents=True, exist_ok=True)

    with open(history_file, "w", encoding="utf-8") as f:
        json.dump(history, f, indent=2, sort_keys=True)
        f.write("\n")


def _str_or_none(value: object | None) -> str | None:
    return None if value is None else str(value)


def _error_text(err: BaseException | None) -> str | None:
    return None if err is None else f"{type(err).__name__}: {err}"


def record_to_dict(record: PromotionRecord) -> dict[str, Any]:
    """Serialize a PromotionRecord to JSON-compatible values."""
    return {
        "vendor": record.vendor,
        "result": record.result,
        "from_version": _str_or_none(record.from_version),
        "to_version": _str_or_none(record.to_version),
        "reason": record.reason,
        "error": _error_text(record.error),
        "archived_path": _str_or_none(record.archived_path),
        "installed_path": _str_or_none(record.installed_path),
        "timestamp": record.timestamp.isoformat(),
    }


def seed_to_dict(seed: SeedRecord) -> dict[str, Any]:
    """Serialize a SeedRecord to JSON-compatible values."""
    return {
        "vendor": seed.vendor,
        "version": _str_or_none(seed.version),
        "source": str(seed.source),
        "destination": str(seed.destination),
        "timestamp": seed.timestamp.isoformat(),
    }


def _is_history(data: Any) -> bool:
    return (
        isinstance(data, dict)
        and isinstance(data.get("runs", []), list)
        and isinstance(data.get("metadata", {}), dict)
    )


def _backup_corrupt(history_file: Path) -> None:
    backup = history_file.with_name(history_file.name + ".backup")
    history_file.replace(backup)


def append_run(
    history_file: Path,
    result: RunResult,
    *,
    started: datetime | None = None,
) -> dict[str, Any]:
    """Append one run to the history file, creating it if needed.

    A history file that is not valid JSON, or whose top level, ``runs`` or
    ``metadata`` has the wrong type, is moved aside to ``<name>.backup``
    and a fresh history is started.

    Args:
        history_file: JSON file to update.
        result: The finished run.
        started: When the run began. Stored as null when not given.

    Returns:
        The history as written.

    Raises:
        FilesystemError: If the history file cannot be read or written.
    """
    try:
        try:
            history = load_history(history_file)
        except FileNotFoundError:
            history = create_default_history()
        except ValueError:
            # Invalid JSON or undecodable bytes
            _backup_corrupt(history_file)
            history = create_default_history()
        else:
            if not _is_history(history):
                _backup_corrupt(history_file)
                history = create_default_history()

        now = datetime.now(UTC)
        history.setdefault("runs", []).append(
            {
                "started": started.isoformat() if started else None,
                "finished": now.isoformat(),
                "records": [record_to_dict(r) for r in result.records],
                "seeds": [seed_to_dict(v.seed) for v in result.vendors if v.seed],
            }
        )
        history.setdefault("metadata", {})
        history["metadata"]["driverstage_version"] = __version__
        history["metadata"]["last_updated"] = now.isoformat()

        save_history(history, history_file)
    except OSError as err:
        raise FilesystemError("write", history_file) from err
    return history
