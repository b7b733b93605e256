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

"""Promotion policy for driverstage.

Modules:

updates : module
    Version-based decision for promoting a New candidate to Active.

Public API:

should_promote : function
    Determine if a candidate version should replace the current one.

Example:
    from driverstage.policy import should_promote

    should_promote(None, candidate)      # True, bootstrap
    should_promote(current, current)     # False, idempotent

"""

from .updates import should_promote

__all__ = ["should_promote"]
