"""
Buildx command wrapper

In plugin mode buildx is reached through `docker buildx ...`, in standalone
mode (no docker CLI on the runner) through the `buildx` binary itself.
"""

import logging
from typing import List, Optional, Tuple

from .. import constants
from ..datacls import Builder
from ..exec import Exec, ExecOutput, check
from .inspect import parse_inspect
from .version import parse_version, satisfies

logger = logging.getLogger(__name__)


class Buildx:
    """
    Resolves the buildx invocation once and runs subcommands through `Exec`
    """

    def __init__(self, exec_: Optional[Exec] = None, standalone: bool = False):
        self.exec = exec_ or Exec()
        self.standalone = standalone
        self._version: Optional[str] = None

    def get_command(self, args: List[str]) -> Tuple[str, List[str]]:
        if self.standalone:
            return constants.STANDALONE_BIN_NAME, list(args)
        return "docker", ["buildx", *args]

    def run(self, args: List[str], silent: bool = False) -> ExecOutput:
        """Run a buildx subcommand, raising on failure with the last stderr line"""
        command, cmd_args = self.get_command(args)
        output = self.exec.get_exec_output(command, cmd_args, silent=silent, ignore_return_code=True)
        return check(output, [command, *cmd_args])

    def is_available(self) -> bool:
        command, cmd_args = self.get_command([])
        try:
            output = self.exec.get_exec_output(command, cmd_args, silent=True, ignore_return_code=True)
        except FileNotFoundError:
            logger.debug(f"[Buildx] {command} not found")
            return False
        if output.failed:
            return False
        return output.success

    def version(self) -> str:
        """Parsed version of the resolved buildx, cached per instance"""
        if self._version is None:
            output = self.run(["version"], silent=True)
            self._version = parse_version(output.stdout)
            logger.debug(f"[Buildx] Resolved buildx version {self._version}")
        return self._version

    def reset_version(self):
        """Forget the cached version, after a new binary was installed"""
        self._version = None

    def print_version(self):
        self.run(["version"])

    def version_satisfies(self, range_: str) -> bool:
        return satisfies(self.version(), range_)

    def inspect(self, name: str = "") -> Builder:
        args = ["inspect"]
        if name:
            args.append(name)
        output = self.run(args, silent=True)
        return parse_inspect(output.stdout)

    def exists(self, name: str) -> bool:
        command, cmd_args = self.get_command(["inspect", name])
        output = self.exec.get_exec_output(command, cmd_args, silent=True, ignore_return_code=True)
        return output.success
