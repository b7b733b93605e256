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

This module loads the YAML configuration that names the base path, the
four stage folders, the vendor list and the driver filename pattern, and
returns it as an immutable DriverStageConfig.

Public API:

- load_config: Load and validate a configuration file
- build_config: Validate an already-parsed mapping
- DriverStageConfig: The immutable configuration

Example:
    Basic usage:

        from pathlib import Path
        from driverstage.config import load_config

        config = load_config(Path("driverstage.yaml"))
        print(config.vendors)  # ("NVIDIA", "AMD", "Intel")

"""

from .loader import DriverStageConfig, build_config, load_config

__all__ = ["DriverStageConfig", "build_config", "load_config"]
