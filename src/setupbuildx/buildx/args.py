"""
Argument synthesizer

Builds the exact argument vectors passed to buildx. Order matters: every
append below happens in a fixed sequence.
"""

import logging
import os
import tempfile
import uuid
from typing import List, Mapping, Optional

from .. import constants
from ..buildkit import BuildkitConfig
from ..datacls import Node
from .version import capabilities

logger = logging.getLogger(__name__)


def driver_supports_buildkitd_flags(driver: str) -> bool:
    return driver in constants.FLAG_SUPPORTING_DRIVERS


def resolve_buildkitd_flags(driver: str, flags: Optional[str]) -> Optional[str]:
    """
    Flags policy of the primary node:
    - explicit flags are kept for every driver but `remote`
    - without flags, the default entitlements are injected for drivers that take flags

    Returns:
        Optional[str]: The value for `--buildkitd-flags`, None to omit it
    """
    if flags:
        if driver in constants.FLAG_SUPPRESSED_DRIVERS:
            logger.debug(f"[Args] Dropping buildkitd flags for driver {driver}")
            return None
        return flags
    if driver_supports_buildkitd_flags(driver):
        return constants.DEFAULT_BUILDKITD_FLAGS
    return None


def get_create_args(inputs, version: str, buildkit_config: Optional[BuildkitConfig] = None) -> List[str]:
    """
    Arguments for `buildx create` of the primary node.

    Args:
        inputs: Resolved inputs (name, driver, driver_opts, buildkitd_flags,
            buildkitd_config, buildkitd_config_inline, platforms, use, endpoint)
        version: Resolved buildx version
        buildkit_config: Where to materialize the buildkitd config

    Raises:
        NotFoundError: If the buildkitd config file does not exist
    """
    caps = capabilities(version)
    args = ["create", "--name", inputs.name, "--driver", inputs.driver]

    if caps.supports_driver_opts:
        for opt in inputs.driver_opts:
            args.extend(["--driver-opt", opt])
        flags = resolve_buildkitd_flags(inputs.driver, inputs.buildkitd_flags)
        if flags:
            args.extend(["--buildkitd-flags", flags])

    if inputs.platforms:
        args.extend(["--platform", ",".join(inputs.platforms)])

    if inputs.use:
        args.append("--use")

    if driver_supports_buildkitd_flags(inputs.driver):
        if inputs.buildkitd_config or inputs.buildkitd_config_inline:
            buildkit_config = buildkit_config or BuildkitConfig(tempfile.gettempdir())
            config_path = buildkit_config.resolve(inputs.buildkitd_config, inputs.buildkitd_config_inline)
            args.extend(["--config", config_path])

    if inputs.endpoint:
        args.append(inputs.endpoint)

    return args


def get_append_args(inputs, node: Node, version: str) -> List[str]:
    """
    Arguments for `buildx create --append` of one extra node
    """
    caps = capabilities(version)
    args = ["create", "--name", inputs.name, "--append"]

    if node.name:
        args.extend(["--node", node.name])
    elif inputs.driver == constants.DRIVER_KUBERNETES and caps.requires_explicit_append_node_name:
        args.extend(["--node", f"{constants.NODE_NAME_PREFIX}{uuid.uuid4()}"])

    # an explicit empty `driver-opts` still opens the gate for flags
    if node.driver_opts is not None and caps.supports_driver_opts:
        for opt in node.driver_opts:
            args.extend(["--driver-opt", opt])
        if driver_supports_buildkitd_flags(inputs.driver) and node.buildkitd_flags:
            args.extend(["--buildkitd-flags", node.buildkitd_flags])

    if node.platforms:
        args.extend(["--platform", node.platforms])

    if node.endpoint:
        args.append(node.endpoint)

    return args


def get_inspect_args(inputs, version: str) -> List[str]:
    args = ["inspect", "--bootstrap"]
    if capabilities(version).supports_builder_flag:
        args.extend(["--builder", inputs.name])
    return args


def get_rm_args(name: str, keep_state: bool = False) -> List[str]:
    args = ["rm"]
    if keep_state:
        args.append("--keep-state")
    args.append(name)
    return args


def get_build_args(git_context: str, output_dir: str, env: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Arguments to build buildx from a `repo#ref` git context into `output_dir`
    """
    env = os.environ if env is None else env
    args = [
        "build",
        "--target", "binaries",
        "--build-arg", "BUILDKIT_CONTEXT_KEEP_GIT_DIR=1",
        "--output", f"type=local,dest={output_dir}",
    ]
    if env.get("GIT_AUTH_TOKEN"):
        args.extend(["--secret", "id=GIT_AUTH_TOKEN"])
    args.append(git_context)
    return args
