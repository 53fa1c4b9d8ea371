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
Shared fixtures: a command runner that records commands instead of running them.
"""
import pytest
from mcdock.MODELS.server_config import ServerConfig
from mcdock.RUNNERS.process_runner import CommandResult


class FakeRunner:
    """
    Records every command and answers with scripted exit codes.

    ``failures`` maps a command prefix (tuple) to the exit code returned for
    commands starting with it; everything else exits 0.
    """
    def __init__(self, failures=None):
        self.failures = dict(failures or {})
        self.calls = []

    def run(self, command, working_dir=None, inherit_streams=True):
        self.calls.append(list(command))
        for prefix, code in self.failures.items():
            if tuple(command[:len(prefix)]) == tuple(prefix):
                return CommandResult(command=list(command), returncode=code)
        return CommandResult(command=list(command), returncode=0)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def make_runner():
    return FakeRunner


@pytest.fixture
def config(tmp_path):
    return ServerConfig(**{
        'instance-data-dir': str(tmp_path / "data"),
        'build-dir': str(tmp_path),
    })
