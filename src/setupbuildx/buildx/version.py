"""
Version parser

Extracts the version token from a `buildx version` banner and gates
features on it. Source-built binaries report a 7-char commit hash instead of
a semantic version; such tokens satisfy every range.
"""

import logging
import re
from dataclasses import dataclass

from .. import constants
from ..exceptions import ParseError
from ..rules import Rule

logger = logging.getLogger(__name__)

banner_pattern = re.compile(r"\sv?([0-9a-f]{7}|[0-9.]+)")
short_hash_token = re.compile(r"^[0-9a-f]{7}$")


def parse_version(banner: str) -> str:
    """
    Parse the version token out of a banner like
    `github.com/docker/buildx v0.11.2 9872040`.

    Raises:
        ParseError: If no token is found
    """
    match = banner_pattern.search(banner)
    if not match:
        raise ParseError("Cannot parse buildx version", raw=banner)
    return match.group(1)


def satisfies(version: str, range_: str) -> bool:
    """
    Whether `version` is inside `range_`. A 7-char lowercase hex token is
    always considered satisfying.
    """
    if short_hash_token.match(version):
        return True
    return Rule(range_).allows(version)


@dataclass(frozen=True)
class Capabilities:
    """Feature gates derived from the resolved buildx version"""

    supports_driver_opts: bool
    supports_builder_flag: bool
    requires_explicit_append_node_name: bool


def capabilities(version: str) -> Capabilities:
    gates = {name: satisfies(version, range_) for name, range_ in constants.CAPABILITY_RULES.items()}
    logger.debug(f"[Version] Capabilities for {version}: {gates}")
    return Capabilities(**gates)
