"""
Builder-state parser

Turns the textual dump of `buildx inspect` into a `Builder`:

    Name:          builder-5cb467f7
    Driver:        docker-container
    Last Activity: 2023-06-13 13:37:36 +0000 UTC

    Nodes:
    Name:      builder-5cb467f70
    Endpoint:  unix:///var/run/docker.sock
    Status:    running
    Buildkit:  v0.11.6
    Platforms: linux/amd64*, linux/arm64, linux/386

The first `Name` is the builder, every following one starts a new node.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from ..datacls import Builder, Node
from ..exceptions import ParseError

logger = logging.getLogger(__name__)

driver_opt_pattern = re.compile(r'([a-zA-Z0-9_.]+)="([^"]*)"')

NODE_KEYS = {
    "endpoint": "endpoint",
    "status": "status",
    "flags": "buildkitd_flags",
    "buildkit daemon flags": "buildkitd_flags",
    "buildkit": "buildkit",
    "buildkit version": "buildkit",
}


def parse_platforms(value: str) -> str:
    """
    `linux/amd64*, linux/arm64` -> `linux/amd64`; without a `*` marker the
    whole list is kept. Entries are joined with bare commas.
    """
    entries = value.split(", ")
    if "*" in value:
        entries = [entry.replace("*", "") for entry in entries if "*" in entry]
    return ",".join(entries)


def parse_driver_opts(value: str) -> List[str]:
    return [f"{key}={val}" for key, val in driver_opt_pattern.findall(value)]


def parse_inspect(text: str, multi_node: bool = True) -> Builder:
    """
    Parse `buildx inspect` output.

    Args:
        text: Raw stdout of the inspect command
        multi_node: When False, stop at the first `Platforms` line like the
            single-node output of early buildx releases

    Returns:
        Builder: A fresh snapshot, nodes in output order

    Raises:
        ParseError: If no builder name could be found
    """
    builder: Dict[str, Any] = {}
    nodes: List[Dict[str, Any]] = []
    node: Dict[str, Any] = {}
    section: Optional[str] = None

    for line in text.strip().splitlines():
        if not line.strip():
            continue
        key, _, rest = line.partition(":")
        value = ":".join(part.strip() for part in rest.split(":"))
        lkey = key.strip().lower()
        indented = line[:1].isspace()

        if section == "labels":
            if indented and rest:
                node.setdefault("labels", {})[key.strip()] = value
                continue
            section = None

        if lkey == "labels":
            section = "labels"
            node["labels"] = {}
            continue
        if not value:
            continue

        if lkey == "name":
            if "name" not in builder:
                builder["name"] = value
            else:
                if node:
                    nodes.append(node)
                node = {"name": value}
        elif lkey == "driver":
            builder["driver"] = value
        elif lkey == "last activity":
            builder["last_activity"] = value
        elif lkey == "driver options":
            node["driver_opts"] = parse_driver_opts(value)
        elif lkey in NODE_KEYS:
            node[NODE_KEYS[lkey]] = value
        elif lkey == "platforms":
            node["platforms"] = parse_platforms(value)
            if not multi_node:
                break

    if node:
        nodes.append(node)

    if "name" not in builder:
        raise ParseError("Cannot parse builder name from inspect output", raw=text)

    result = Builder(nodes=[Node(**n) for n in nodes], **builder)
    logger.debug(f"[Inspect] Parsed builder {result.name} with {len(result.nodes)} node(s)")
    return result
