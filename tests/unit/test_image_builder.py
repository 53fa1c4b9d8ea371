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
Unit tests for the image builder.
"""
import os
from mcdock.BUILDERS.image_builder import ImageBuilder
from mcdock.errors import VersionResolutionError

JAR_URL = "https://launcher.example/server.jar"

EXPECTED_DOCKERFILE = (
    'FROM openjdk:17-slim\n'
    'ADD https://launcher.example/server.jar /data/bin/server-1.18.2.jar\n'
    'RUN useradd -u 1024 -s /usr/sbin/nologin gameserver && mkdir /data/instance && chown -R 1024 /data/*\n'
    'WORKDIR /data/instance\n'
    'USER gameserver\n'
    'CMD ["java", "-Xmx1024M", "-Dlog4j2.formatMsgNoLookups=true", "-jar", "/data/bin/server-1.18.2.jar", "--nogui"]\n'
)


class StubResolver:
    """Resolver returning a fixed URL or raising a fixed error."""

    def __init__(self, url=JAR_URL, error=None):
        self.url = url
        self.error = error
        self.versions = []

    def resolve(self, version):
        self.versions.append(version)
        if self.error:
            raise self.error
        return self.url


class TestRenderRecipe:
    """Tests for Dockerfile rendering."""

    def test_debian_recipe(self, config, fake_runner):
        """Test the full rendered text for a Debian based image."""
        builder = ImageBuilder(config, fake_runner, resolver=StubResolver())
        assert builder.render_recipe(JAR_URL) == EXPECTED_DOCKERFILE

    def test_alpine_changes_only_user_creation(self, config, fake_runner):
        """Test that an Alpine image only swaps the user creation command."""
        debian = ImageBuilder(config.model_copy(update={'jdk_image': 'eclipse-temurin:17'}), fake_runner)
        alpine = ImageBuilder(config.model_copy(update={'jdk_image': 'eclipse-temurin:17-ALPINE'}), fake_runner)

        debian_lines = debian.render_recipe(JAR_URL).splitlines()
        alpine_lines = alpine.render_recipe(JAR_URL).splitlines()

        differing = [i for i, (a, b) in enumerate(zip(debian_lines, alpine_lines)) if a != b]
        assert differing == [0, 2]
        assert debian_lines[2].startswith("RUN useradd -u 1024 -s /usr/sbin/nologin gameserver &&")
        assert alpine_lines[2].startswith("RUN adduser -u 1024 -s /usr/sbin/nologin -D gameserver &&")
        assert debian_lines[2].split("&&", 1)[1] == alpine_lines[2].split("&&", 1)[1]

    def test_memory_and_version(self, config, fake_runner):
        """Test that memory and version flow into the launch command."""
        conf = config.model_copy(update={'memory': '6G', 'mc_version': '1.20.1'})
        text = ImageBuilder(conf, fake_runner).render_recipe(JAR_URL)
        assert '"-Xmx6G"' in text
        assert '/data/bin/server-1.20.1.jar' in text


class TestWriteRecipe:
    """Tests for writing the Dockerfile."""

    def test_writes_dockerfile(self, config, fake_runner, tmp_path):
        """Test that the Dockerfile is written to the build directory."""
        builder = ImageBuilder(config, fake_runner)
        assert builder.write_recipe(JAR_URL) is True
        assert (tmp_path / "Dockerfile").read_text() == EXPECTED_DOCKERFILE

    def test_overwrites_previous_recipe(self, config, fake_runner, tmp_path):
        """Test that an older, longer Dockerfile is fully replaced."""
        (tmp_path / "Dockerfile").write_text("FROM scratch\n" * 100)
        ImageBuilder(config, fake_runner).write_recipe(JAR_URL)
        assert (tmp_path / "Dockerfile").read_text() == EXPECTED_DOCKERFILE

    def test_no_temp_files_left(self, config, fake_runner, tmp_path):
        """Test that only the Dockerfile remains after a write."""
        ImageBuilder(config, fake_runner).write_recipe(JAR_URL)
        assert sorted(os.listdir(tmp_path)) == ["Dockerfile"]

    def test_bad_rootless_writes_nothing(self, config, fake_runner, tmp_path):
        """Test that a malformed rootless entry aborts before writing."""
        conf = config.model_copy(update={'rootless': 'gameserver'})
        assert ImageBuilder(conf, fake_runner).write_recipe(JAR_URL) is False
        assert not (tmp_path / "Dockerfile").exists()

    def test_unwritable_build_dir(self, config, fake_runner, tmp_path):
        """Test that a missing build directory fails cleanly."""
        conf = config.model_copy(update={'build_dir': str(tmp_path / "missing")})
        assert ImageBuilder(conf, fake_runner).write_recipe(JAR_URL) is False


class TestInstall:
    """Tests for the install operation."""

    def test_install(self, config, fake_runner, tmp_path):
        """Test resolving, writing and building."""
        resolver = StubResolver()
        assert ImageBuilder(config, fake_runner, resolver=resolver).install() is True
        assert resolver.versions == ["1.18.2"]
        assert (tmp_path / "Dockerfile").exists()
        assert fake_runner.calls == [
            ["docker", "build", "--tag", "mc-vanilla-server:build-0", str(tmp_path)]
        ]

    def test_bad_rootless_skips_everything(self, config, fake_runner, tmp_path):
        """Test that a malformed rootless entry fails before network or engine."""
        resolver = StubResolver()
        conf = config.model_copy(update={'rootless': 'gameserver'})
        assert ImageBuilder(conf, fake_runner, resolver=resolver).install() is False
        assert resolver.versions == []
        assert fake_runner.calls == []
        assert not (tmp_path / "Dockerfile").exists()

    def test_resolution_failure(self, config, fake_runner, tmp_path, capsys):
        """Test that a resolution error aborts the install."""
        resolver = StubResolver(error=VersionResolutionError("Invalid version!"))
        assert ImageBuilder(config, fake_runner, resolver=resolver).install() is False
        assert "Invalid version!" in capsys.readouterr().err
        assert fake_runner.calls == []
        assert not (tmp_path / "Dockerfile").exists()

    def test_build_failure(self, config, make_runner):
        """Test that a failed engine build fails the install."""
        runner = make_runner({("docker", "build"): 1})
        assert ImageBuilder(config, runner, resolver=StubResolver()).install() is False
        assert len(runner.calls) == 1

    def test_custom_engine(self, config, fake_runner):
        """Test that the configured engine executable is used."""
        conf = config.model_copy(update={'engine': 'podman'})
        ImageBuilder(conf, fake_runner, resolver=StubResolver()).build_image()
        assert fake_runner.calls[0][0] == "podman"
