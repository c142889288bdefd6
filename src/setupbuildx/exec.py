"""
Process execution collaborator

Every external command (docker, buildx, git) goes through `Exec` so that
callers share one result shape and tests can substitute a fake.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from .exceptions import ExternalCommandError
from .utils.util import last_line

logger = logging.getLogger(__name__)


@dataclass
class ExecOutput:
    """Captured result of one process invocation"""

    stdout: str
    stderr: str
    exit_code: int

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def failed(self) -> bool:
        """A command only counts as failed when it exits non-zero AND wrote to stderr"""
        return self.exit_code != 0 and len(self.stderr) > 0

    @property
    def error_message(self) -> str:
        return last_line(self.stderr)


class Exec:
    """Synchronous process runner with captured stdout/stderr"""

    def get_exec_output(
        self,
        command: str,
        args: Optional[List[str]] = None,
        silent: bool = False,
        ignore_return_code: bool = False,
        input: Optional[str] = None,
    ) -> ExecOutput:
        """
        Run `command args...` and capture its output.

        Args:
            command: Executable name or path
            args: Arguments, passed verbatim
            silent: Do not echo the command line and its output
            ignore_return_code: Return the result instead of raising on a non-zero exit
            input: Text written to the process stdin

        Returns:
            ExecOutput: stdout, stderr and exit code

        Raises:
            FileNotFoundError: If the executable does not exist
            ExternalCommandError: On a non-zero exit unless `ignore_return_code`
        """
        cmd = [command, *(args or [])]
        if not silent:
            logger.info(f"[command]{shlex.join(cmd)}")
        else:
            logger.debug(f"[command]{shlex.join(cmd)}")

        result = subprocess.run(
            cmd,
            input=input if input is not None else "",
            capture_output=True,
            encoding="utf-8",
            errors="replace",
        )
        output = ExecOutput(stdout=result.stdout, stderr=result.stderr, exit_code=result.returncode)

        if not silent:
            for line in output.stdout.splitlines():
                logger.info(line)
            for line in output.stderr.splitlines():
                logger.info(line)

        if output.exit_code != 0 and not ignore_return_code:
            raise ExternalCommandError(
                f"{command} failed with exit code {output.exit_code}: {output.error_message}",
                command=cmd,
                exit_code=output.exit_code,
                stderr=output.stderr,
            )
        return output


def check(output: ExecOutput, command: List[str], prefix: str = "") -> ExecOutput:
    """
    Raise ExternalCommandError when `output` failed, using the last stderr line as message
    """
    if output.failed:
        message = f"{prefix}{output.error_message}" if prefix else output.error_message
        raise ExternalCommandError(message, command=command, exit_code=output.exit_code, stderr=output.stderr)
    return output
