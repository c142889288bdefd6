"""
BuildKit daemon config materializer

The `--config` flag of `buildx create` takes a path, so both the file and the
inline form of the `buildkitd-config` input are copied into one generated
TOML file under the temp directory.
"""

import logging
import os
import re
from typing import Optional

from . import constants
from .datacls import Node
from .exceptions import NotFoundError, ParseError

logger = logging.getLogger(__name__)


class BuildkitConfig:
    """Materializes buildkitd TOML into `<tmp_dir>/buildkitd.toml`"""

    def __init__(self, tmp_dir: str):
        self.tmp_dir = tmp_dir

    @property
    def path(self) -> str:
        return os.path.join(self.tmp_dir, constants.BUILDKITD_CONFIG_FILENAME)

    def resolve_from_file(self, config_file: str) -> str:
        """
        Copy a user-provided config file.

        Raises:
            NotFoundError: If `config_file` does not exist
        """
        if not os.path.isfile(config_file):
            raise NotFoundError(f"config file {config_file} not found")
        with open(config_file, "rb") as f:
            return self._write(f.read())

    def resolve_from_string(self, content: str) -> str:
        return self._write(content.encode("utf-8"))

    def resolve(self, config_file: str = "", inline: str = "") -> Optional[str]:
        """File form wins over inline form; None when neither is given"""
        if config_file:
            return self.resolve_from_file(config_file)
        if inline:
            return self.resolve_from_string(inline)
        return None

    def _write(self, content: bytes) -> str:
        os.makedirs(self.tmp_dir, exist_ok=True)
        with open(self.path, "wb") as f:
            f.write(content)
        logger.debug(f"[BuildKit] Wrote buildkitd config to {self.path}")
        return self.path


buildkitd_version_pattern = re.compile(r"\sv?([0-9][0-9a-z.+-]*)")


def parse_buildkitd_version(output: str) -> str:
    """
    `buildkitd github.com/moby/buildkit v0.11.6 2951a28` -> `0.11.6`

    Raises:
        ParseError: If no version token is found
    """
    match = buildkitd_version_pattern.search(output)
    if not match:
        raise ParseError("Cannot parse BuildKit version", raw=output)
    return match.group(1)


def get_buildkit_version(node: Node, docker, container_prefix: str = constants.CONTAINER_NAME_PREFIX) -> str:
    """
    Version reported by inspect, else asked from the node's BuildKit container
    """
    if node.buildkit:
        return node.buildkit
    output = docker.container_exec(f"{container_prefix}{node.name}", ["buildkitd", "--version"])
    return parse_buildkitd_version(output)
