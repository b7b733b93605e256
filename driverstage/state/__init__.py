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

"""Run history persistence for driverstage.

Public API:

- append_run: Append a run's records to the history file
- load_history: Load history from JSON file
- save_history: Save history to JSON file with pretty-printing

Example:
    from pathlib import Path
    from driverstage.state import append_run

    append_run(Path("state/history.json"), result)

"""

from .history import append_run, load_history, save_history

__all__ = ["append_run", "load_history", "save_history"]
