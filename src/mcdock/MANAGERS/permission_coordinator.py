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
Ownership and SELinux label management for the instance data directory.

The directory is owned by the rootless UID while the container runs and
by root (inside the engine's user namespace) otherwise, so that the host
user can read and edit the server data.
"""
import sys
from ..MODELS.server_config import ServerConfig
from ..RUNNERS.process_runner import CommandRunner

SELINUX_SANDBOX_TYPE = "svirt_sandbox_file_t"


class PermissionCoordinator:
    """
    Toggles the owner of the instance data directory between host and container.
    """
    def __init__(self, config: ServerConfig, runner: CommandRunner):
        """
        Initializes the coordinator.

        :param config: The server configuration.
        :param runner: Runner used for the chown and chcon commands.
        """
        self.config = config
        self.runner = runner

    def _chown(self, owner: str) -> bool:
        result = self.runner.run([
            self.config.engine, "unshare",
            "chown", "-R", owner,
            self.config.instance_data_dir
        ])
        return result.ok

    def hand_off(self) -> bool:
        """
        Gives the data directory to the rootless container user.
        Must succeed before the container is started.
        """
        try:
            rootless = self.config.rootless_identity()
        except ValueError as e:
            print(e, file=sys.stderr)
            return False

        print("Setting up file permissions...")
        if self._chown(rootless.uid):
            print("File permission setup successfully!")
            return True

        print("File permission setup failed!", file=sys.stderr)
        return False

    def reset(self) -> bool:
        """
        Gives the data directory back to root so the host user can access it.
        """
        if self._chown("0:0"):
            print("File permission reset successfully!")
            return True

        print("File permission reset failed!", file=sys.stderr)
        return False

    def apply_security_label(self) -> bool:
        """
        Resets ownership, then labels the data directory so the engine may
        mount it under SELinux.
        """
        print("Setting up SELinux flags...")

        if not self.reset():
            return False

        result = self.runner.run([
            "chcon", "-Rt", SELINUX_SANDBOX_TYPE,
            self.config.instance_data_dir
        ])
        if result.ok:
            print("SELinux flag change successfully!")
            return True

        print("SELinux flag change failed!", file=sys.stderr)
        return False
