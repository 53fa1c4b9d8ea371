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
Synchronous execution of external commands (container engine, chcon).
"""
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class CommandResult:
    """
    Outcome of a single external command.
    """

    command: List[str]
    returncode: Optional[int]
    output: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True only when the process was launched and exited with status 0."""
        return self.returncode == 0


class CommandRunner:
    """
    Runs one command at a time and waits for it to finish.
    """
    def __init__(self, name: str = "mcdock"):
        """
        Initializes the command runner.

        Args:
            name (str): Prefix used when echoing commands.
        """
        self.name = name

    def run(self,
            command: List[str],
            working_dir: Optional[str] = None,
            inherit_streams: bool = True) -> CommandResult:
        """
        Runs a command to completion.

        Args:
            command (List[str]): Command and arguments to execute.
            working_dir (Optional[str]): Directory to run the command in.
            inherit_streams (bool): Attach the command to this process's
                stdin/stdout/stderr. When False, stdout is captured instead.

        Returns:
            CommandResult: Exit status of the command. A command that could
            not be launched has a returncode of None.
        """
        print(f"[{self.name}] Running: {' '.join(command)}")

        try:
            if inherit_streams:
                completed = subprocess.run(command, cwd=working_dir, shell=False)
            else:
                completed = subprocess.run(
                    command,
                    cwd=working_dir,
                    stdout=subprocess.PIPE,
                    text=True,
                    shell=False
                )
        except OSError as e:
            print(f"[{self.name}] Failed to launch {command[0]}: {e}", file=sys.stderr)
            return CommandResult(command=command, returncode=None, error=str(e))

        return CommandResult(
            command=command,
            returncode=completed.returncode,
            output=completed.stdout
        )
