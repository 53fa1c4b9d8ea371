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
Client for the Minecraft version manifest service.
Resolves a release id such as "1.18.2" to its server jar download URL.
"""

import json
import sys
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..MODELS.server_config import VERSION_MANIFEST_URL
from ..errors import VersionResolutionError


class VersionResolver:
    """
    Looks up server downloads in the version manifest.

    Requests are made one after the other and block until they complete.
    """

    def __init__(self, manifest_url: str = VERSION_MANIFEST_URL, timeout: Optional[float] = None):
        """
        Initialize the resolver.

        Args:
            manifest_url: URL of the version manifest index.
            timeout: Seconds to wait for each request. None waits forever.
        """
        self.manifest_url = manifest_url
        self.timeout = timeout

    def _get_json(self, url: str, what: str) -> Dict[str, Any]:
        """Fetch a JSON document, turning every failure into a VersionResolutionError."""
        try:
            request = Request(url, headers={"Accept": "application/json"})
        except ValueError as e:
            raise VersionResolutionError(f"Unable to acquire {what} (bad URL {url!r})! Abort!") from e

        try:
            with urlopen(request, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                if status != 200:
                    raise VersionResolutionError(f"Unable to acquire {what} ({status})! Abort!")
                data = json.loads(response.read().decode())
        except HTTPError as e:
            raise VersionResolutionError(f"Unable to acquire {what} ({e.code})! Abort!") from e
        except (URLError, OSError) as e:
            print(f"Warning: {e}", file=sys.stderr)
            raise VersionResolutionError(f"Unable to acquire {what}! Abort!") from e
        except ValueError as e:
            raise VersionResolutionError(f"Malformed {what}! Abort!") from e

        if not isinstance(data, dict):
            raise VersionResolutionError(f"Malformed {what}! Abort!")
        return data

    def resolve(self, version: str) -> str:
        """
        Resolve a release id to its server jar URL.

        Args:
            version: Release id, matched exactly against the manifest entries.

        Returns:
            Download URL of the server jar.

        Raises:
            VersionResolutionError: On any HTTP failure, an unknown version
                or a manifest without a server download.
        """
        index = self._get_json(self.manifest_url, "Minecraft version list")

        entries = index.get("versions")
        if not isinstance(entries, list):
            raise VersionResolutionError("Malformed Minecraft version list! Abort!")

        for entry in entries:
            if not isinstance(entry, dict):
                raise VersionResolutionError("Malformed Minecraft version list! Abort!")
            if entry.get("id") != version:
                continue

            manifest_url = entry.get("url")
            if not manifest_url or not isinstance(manifest_url, str):
                raise VersionResolutionError(f"Version {version} has no manifest URL! Abort!")

            manifest = self._get_json(manifest_url, "Minecraft version manifest")
            try:
                server_url = manifest["downloads"]["server"]["url"]
            except (KeyError, TypeError) as e:
                raise VersionResolutionError(
                    f"Version {version} has no server download! Abort!"
                ) from e
            if not isinstance(server_url, str) or not server_url:
                raise VersionResolutionError(f"Version {version} has no server download! Abort!")
            return server_url

        raise VersionResolutionError("Invalid version!")
