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
Builder for the server image: renders the Dockerfile and runs the engine build.
"""
import os
import sys
import tempfile
from typing import Optional
from jinja2 import Template
from ..MODELS.server_config import ServerConfig, RootlessIdentity
from ..REGISTRY.version_manifest import VersionResolver
from ..RUNNERS.process_runner import CommandRunner
from ..errors import VersionResolutionError

DOCKERFILE_TEMPLATE = """\
FROM {{ jdk_image }}
ADD {{ server_jar_url }} {{ jar_path }}
RUN {{ setup_rootless_cmd }} && mkdir /data/instance && chown -R {{ rootless.uid }} /data/*
WORKDIR /data/instance
USER {{ rootless.name }}
CMD ["java", "-Xmx{{ memory }}", "-Dlog4j2.formatMsgNoLookups=true", "-jar", "{{ jar_path }}", "--nogui"]
"""


def setup_rootless_command(jdk_image: str, rootless: RootlessIdentity) -> str:
    """
    Returns the user creation command for the base image's OS family.
    Alpine ships busybox adduser; everything else is assumed to have useradd.
    """
    if "alpine" in jdk_image.lower():
        return f"adduser -u {rootless.uid} -s /usr/sbin/nologin -D {rootless.name}"
    return f"useradd -u {rootless.uid} -s /usr/sbin/nologin {rootless.name}"


class ImageBuilder:
    """
    Installs the server by writing a Dockerfile into the build directory
    and building it with the container engine.
    """
    def __init__(self,
                 config: ServerConfig,
                 runner: CommandRunner,
                 resolver: Optional[VersionResolver] = None):
        """
        Initializes the ImageBuilder.

        :param config: The server configuration.
        :param runner: Runner used for the engine build command.
        :param resolver: Version resolver; built from the config when omitted.
        """
        self.config = config
        self.runner = runner
        self.resolver = resolver or VersionResolver(config.manifest_url, timeout=config.manifest_timeout)
        self.template = Template(DOCKERFILE_TEMPLATE, keep_trailing_newline=True)

    @property
    def dockerfile_path(self) -> str:
        return os.path.join(self.config.build_dir, "Dockerfile")

    def render_recipe(self, server_jar_url: str) -> str:
        """
        Renders the Dockerfile contents.

        :param server_jar_url: Download URL of the server jar.
        :return: The Dockerfile text.
        :raises ValueError: If the rootless entry is malformed.
        """
        rootless = self.config.rootless_identity()
        return self.template.render(
            jdk_image=self.config.jdk_image,
            server_jar_url=server_jar_url,
            jar_path=f"/data/bin/server-{self.config.mc_version}.jar",
            setup_rootless_cmd=setup_rootless_command(self.config.jdk_image, rootless),
            rootless=rootless,
            memory=self.config.memory,
        )

    def write_recipe(self, server_jar_url: str) -> bool:
        """
        Writes the Dockerfile, replacing any previous one.
        The file is written next to its final location and renamed into
        place, so a failed write leaves the old Dockerfile untouched.
        """
        try:
            content = self.render_recipe(server_jar_url)
        except ValueError as e:
            print(e, file=sys.stderr)
            return False

        print("Writing Dockerfile...")
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".Dockerfile.", dir=self.config.build_dir)
            with os.fdopen(fd, 'w') as f:
                f.write(content)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.dockerfile_path)
        except OSError as e:
            print(f"Unable to write Dockerfile! Abort!\n{e}", file=sys.stderr)
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False

        return True

    def build_image(self) -> bool:
        """
        Builds the image from the build directory.
        """
        print("Building image...")
        result = self.runner.run(
            [self.config.engine, "build", "--tag", self.config.build_tag, self.config.build_dir],
            working_dir=self.config.build_dir
        )
        if result.ok:
            print("Docker image built successfully!")
            return True

        print("Docker image build failed!", file=sys.stderr)
        return False

    def install(self) -> bool:
        """
        Resolves the server jar, writes the Dockerfile and builds the image.

        :return: True if the image was built.
        """
        try:
            self.config.rootless_identity()
        except ValueError as e:
            print(e, file=sys.stderr)
            print("Installation failed!", file=sys.stderr)
            return False

        try:
            server_jar_url = self.resolver.resolve(self.config.mc_version)
        except VersionResolutionError as e:
            print(e, file=sys.stderr)
            return False

        if not self.write_recipe(server_jar_url) or not self.build_image():
            print("Installation failed!", file=sys.stderr)
            return False

        print("Installation completed!")
        return True
