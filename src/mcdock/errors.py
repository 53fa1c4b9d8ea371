# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
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

"""
Exceptions raised by mcdock components.
"""


class McdockError(Exception):
    """Base class for all mcdock errors."""


class ConfigError(McdockError):
    """The configuration file exists but could not be loaded."""


class VersionResolutionError(McdockError):
    """The requested server version could not be resolved to a download URL."""
