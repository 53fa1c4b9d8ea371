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
Loader for the operator's conf.json file.
"""
import json
import os
import sys
from typing import Optional
from pydantic import ValidationError
from ..MODELS.server_config import PROGRAM_HOME, ServerConfig
from ..errors import ConfigError

DEFAULT_CONFIG_PATH = os.path.join(PROGRAM_HOME, "conf.json")


class ConfigLoader:
    """
    Reads a flat JSON configuration, falling back to the built-in defaults
    when no file is present.
    """
    def __init__(self, default_path: str = DEFAULT_CONFIG_PATH):
        """
        Initializes the loader.

        :param default_path: Path used when no explicit path is given.
        """
        self.default_path = default_path

    def load(self, conf_path: Optional[str] = None) -> ServerConfig:
        """
        Loads the configuration.

        :param conf_path: Path to the configuration file, or None for the default.
        :return: A fully populated ServerConfig.
        :raises ConfigError: If the file exists but is not a valid configuration.
        """
        path = conf_path or self.default_path

        if not os.path.isfile(path):
            print("Warning: No config file found! Default applied.", file=sys.stderr)
            return ServerConfig()

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Unable to load configuration! Abort!\n{e}") from e

        return self.parse_from_dict(data)

    @staticmethod
    def parse_from_dict(data) -> ServerConfig:
        """
        Builds a ServerConfig from an already decoded JSON document.
        Keys missing from the document keep their defaults.
        """
        if not isinstance(data, dict):
            raise ConfigError("Unable to load configuration! Abort!\nTop level must be a JSON object.")
        try:
            return ServerConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Unable to load configuration! Abort!\n{e}") from e
