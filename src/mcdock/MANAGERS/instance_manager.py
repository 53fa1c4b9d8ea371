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
Lifecycle management for the server container.
"""
import sys
from typing import Optional
from ..MODELS.server_config import ServerConfig
from ..RUNNERS.process_runner import CommandRunner
from .permission_coordinator import PermissionCoordinator

NOT_RUNNING_HINT = "Did you start the server? Or perhaps the server crashed?"
RESET_WARNING = "Warning: You may have to reset file permissions manually to access server data!"


class InstanceManager:
    """
    Manages the single server container named in the configuration.

    The container's state is never cached; every operation issues the engine
    command and reports its exit status.
    """
    def __init__(self,
                 config: ServerConfig,
                 runner: CommandRunner,
                 permissions: Optional[PermissionCoordinator] = None):
        """
        Initializes the instance manager.

        :param config: The server configuration.
        :param runner: Runner used for engine commands.
        :param permissions: Coordinator for the data directory; built from
            the config and runner when omitted.
        """
        self.config = config
        self.runner = runner
        self.permissions = permissions or PermissionCoordinator(config, runner)

    def _engine(self, *args: str) -> bool:
        return self.runner.run([self.config.engine, *args]).ok

    def create(self) -> bool:
        """
        Creates the container with the port mapping and data directory mount.
        """
        print("Creating container...")
        port = self.config.server_port
        ok = self._engine(
            "create",
            "-i",
            "--name", self.config.container_name,
            "-p", f"{port}:{port}",
            "-v", f"{self.config.instance_data_dir}:/data/instance:z",
            f"localhost/{self.config.build_tag}"
        )
        if ok:
            print("Container created successfully!")
            return True

        print("Container creation failed!", file=sys.stderr)
        return False

    def start(self) -> bool:
        """
        Prepares the data directory and starts the container.
        Stops at the first step that fails.
        """
        if (self.config.selinux and not self.permissions.apply_security_label()) \
                or not self.permissions.hand_off() \
                or not self._start_container():
            print("Server launch failed!", file=sys.stderr)
            return False

        print("Server launch completed!")
        return True

    def _start_container(self) -> bool:
        if self._engine("start", self.config.container_name):
            print("Server started successfully!")
            return True

        print("Unable to start the server!", file=sys.stderr)
        return False

    def attach(self) -> bool:
        """
        Attaches the terminal to the server console.
        """
        if not self._engine("attach", self.config.container_name):
            print("Unable to attach the server console!", file=sys.stderr)
            print(NOT_RUNNING_HINT, file=sys.stderr)
            return False
        return True

    def shell(self) -> bool:
        """
        Opens an interactive shell as root inside the container.
        """
        if not self._engine("exec", "-itu", "root", self.config.container_name, "/bin/sh"):
            print("Unable to access container shell!", file=sys.stderr)
            print(NOT_RUNNING_HINT, file=sys.stderr)
            return False
        return True

    def stop(self) -> bool:
        """
        Stops the container and hands the data directory back to the host.
        A failed reset is reported but does not fail the stop.
        """
        if not self._engine("stop", self.config.container_name):
            print("Unable to stop the server!", file=sys.stderr)
            return False

        if not self.permissions.reset():
            print(RESET_WARNING, file=sys.stderr)
        print("Server stopped successfully!")
        return True

    def retire(self) -> bool:
        """
        Removes the container and hands the data directory back to the host.
        """
        if not self._engine("container", "rm", self.config.container_name):
            print("Unable to remove the server instance container!", file=sys.stderr)
            return False

        if not self.permissions.reset():
            print(RESET_WARNING, file=sys.stderr)
        print("Server instance container removed successfully!")
        return True

    def reset_perm(self) -> bool:
        """
        Hands the data directory back to the host without touching the container.
        """
        return self.permissions.reset()

    def uninstall(self) -> bool:
        """
        Removes the server image.
        """
        if self._engine("image", "rm", self.config.build_tag):
            print("Server image removed successfully!")
            return True

        print("Unable to remove the server image!", file=sys.stderr)
        print("You must stop the server and remove the container by using `retire` "
              "before uninstalling the image!", file=sys.stderr)
        return False
