"""
Pytest configuration and shared fixtures for driverstage tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from driverstage.config import DriverStageConfig
from driverstage.repository import StageSet


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def stages(tmp_test_dir: Path) -> StageSet:
    """Provide a StageSet with all four directories created."""
    stage_set = StageSet.from_base(tmp_test_dir / "Drivers")
    stage_set.ensure()
    return stage_set


@pytest.fixture
def make_driver():
    """
    Factory fixture for creating fake driver binaries.

    Usage:
        path = make_driver(stages.active, "NVIDIA_Driver_v1.0.exe")

    The file content defaults to the filename so moves can be verified.
    """

    def _create(directory: Path, name: str, content: bytes | None = None) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_bytes(content if content is not None else name.encode("utf-8"))
        return path

    return _create


@pytest.fixture
def make_config(stages: StageSet):
    """
    Factory fixture for a DriverStageConfig over the `stages` tree.

    Usage:
        config = make_config(["NVIDIA", "AMD"], max_workers=2)
    """

    def _create(vendors: list[str], **kwargs: Any) -> DriverStageConfig:
        return DriverStageConfig(
            base_path=stages.active.parent,
            stages=stages,
            vendors=tuple(vendors),
            **kwargs,
        )

    return _create


@pytest.fixture
def sample_config_data() -> dict[str, Any]:
    """Provide a minimal configuration mapping."""
    return {
        "base_path": "Drivers",
        "vendors": ["NVIDIA", "AMD", "Intel"],
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("driverstage.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
