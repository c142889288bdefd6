"""
buildx-facing components

- version: banner parsing, range checks and the capability table
- inspect: `buildx inspect` text -> Builder
- args: argument vectors for create/append/inspect/rm/build
- buildx: command wrapper (plugin or standalone)
- install: download/build and install of the binary
"""

from .version import parse_version, satisfies, capabilities, Capabilities
from .inspect import parse_inspect
from .args import (
    get_create_args,
    get_append_args,
    get_inspect_args,
    get_rm_args,
    get_build_args,
    resolve_buildkitd_flags,
    driver_supports_buildkitd_flags,
)
from .buildx import Buildx
from .install import Installer, filename, resolve_arch

__all__ = [
    'parse_version',
    'satisfies',
    'capabilities',
    'Capabilities',
    'parse_inspect',
    'get_create_args',
    'get_append_args',
    'get_inspect_args',
    'get_rm_args',
    'get_build_args',
    'resolve_buildkitd_flags',
    'driver_supports_buildkitd_flags',
    'Buildx',
    'Installer',
    'filename',
    'resolve_arch',
]
