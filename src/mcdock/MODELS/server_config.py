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
Models for the server configuration and the rootless container identity.
"""
import os
from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# Directory of the installed package; default home for conf.json, the
# build context and the instance data.
PROGRAM_HOME = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

VERSION_MANIFEST_URL = "https://piston-meta.mojang.com/mc/game/version_manifest_v2.json"


@dataclass(frozen=True)
class RootlessIdentity:
    """
    The non-root user the server process runs as inside the container.
    """

    name: str
    uid: str

    @classmethod
    def parse(cls, value: str) -> "RootlessIdentity":
        """
        Parses a "<name>:<uid>" string.

        Args:
            value: The rootless entry from the configuration.

        Returns:
            The parsed identity.

        Raises:
            ValueError: If the entry does not contain both parts.
        """
        parts = value.split(":")
        if len(parts) < 2:
            raise ValueError('Rootless entry must be in the format of "<name>:<uid>"! Abort!')
        return cls(name=parts[0], uid=parts[1])


class ServerConfig(BaseModel):
    """
    Settings for one server image and its container.
    Field aliases match the keys of conf.json.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    mc_version: str = Field(default="1.18.2", alias="mc-version")
    build_tag: str = Field(default="mc-vanilla-server:build-0", alias="build-tag")
    jdk_image: str = Field(default="openjdk:17-slim", alias="jdk-image")
    container_name: str = Field(default="mc-server", alias="container-name")
    rootless: str = "gameserver:1024"
    instance_data_dir: str = Field(
        default=os.path.join(PROGRAM_HOME, "minecraft-server"), alias="instance-data-dir"
    )
    server_port: str = Field(default="25565", alias="server-port")
    memory: str = "1024M"
    selinux: bool = True

    engine: str = "docker"
    build_dir: str = Field(default=PROGRAM_HOME, alias="build-dir")
    manifest_url: str = Field(default=VERSION_MANIFEST_URL, alias="manifest-url")
    manifest_timeout: Optional[float] = Field(default=None, alias="manifest-timeout")

    def rootless_identity(self) -> RootlessIdentity:
        """Parses the rootless entry; raises ValueError when malformed."""
        return RootlessIdentity.parse(self.rootless)
