import io
from typing import Dict, List, Optional, Tuple

import pytest

from setupbuildx.actions import Runtime
from setupbuildx.exceptions import ExternalCommandError
from setupbuildx.exec import Exec, ExecOutput


class FakeExec(Exec):
    """
    Records every invocation and answers from registered command prefixes.
    The longest matching prefix wins; unknown commands succeed silently.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.responses: List[Tuple[Tuple[str, ...], object]] = []

    def on(self, *prefix: str, stdout: str = "", stderr: str = "", exit_code: int = 0,
           raises: Optional[BaseException] = None):
        self.responses.append((tuple(prefix), raises or ExecOutput(stdout, stderr, exit_code)))
        return self

    def get_exec_output(self, command, args=None, silent=False, ignore_return_code=False, input=None):
        cmd = [command, *(args or [])]
        self.calls.append(cmd)
        result = ExecOutput("", "", 0)
        best = -1
        for prefix, response in self.responses:
            if tuple(cmd[:len(prefix)]) == prefix and len(prefix) > best:
                best = len(prefix)
                result = response
        if isinstance(result, BaseException):
            raise result
        if result.exit_code != 0 and not ignore_return_code:
            raise ExternalCommandError(result.error_message, command=cmd, exit_code=result.exit_code,
                                       stderr=result.stderr)
        return result

    def called(self, *prefix: str) -> List[List[str]]:
        return [call for call in self.calls if tuple(call[:len(prefix)]) == prefix]


def read_file_commands(path) -> Dict[str, str]:
    """Parse a GITHUB_OUTPUT/GITHUB_STATE file written with heredoc delimiters"""
    values: Dict[str, str] = {}
    lines = path.read_text().splitlines() if path.exists() else []
    i = 0
    while i < len(lines):
        name, _, delimiter = lines[i].partition("<<")
        body = []
        i += 1
        while lines[i] != delimiter:
            body.append(lines[i])
            i += 1
        values[name] = "\n".join(body)
        i += 1
    return values


@pytest.fixture
def fake_exec():
    return FakeExec()


@pytest.fixture
def runner_env(tmp_path):
    """Runner environment with file commands under tmp_path"""
    return {
        "GITHUB_OUTPUT": str(tmp_path / "github_output"),
        "GITHUB_STATE": str(tmp_path / "github_state"),
        "GITHUB_PATH": str(tmp_path / "github_path"),
        "RUNNER_TEMP": str(tmp_path / "runner_temp"),
        "RUNNER_TOOL_CACHE": str(tmp_path / "tool_cache"),
        "DOCKER_CONFIG": str(tmp_path / "docker_config"),
        "PATH": "/usr/bin",
    }


@pytest.fixture
def runtime(runner_env):
    return Runtime(env=runner_env, stream=io.StringIO())


@pytest.fixture
def outputs(tmp_path):
    return lambda: read_file_commands(tmp_path / "github_output")


@pytest.fixture
def saved_state(tmp_path):
    return lambda: read_file_commands(tmp_path / "github_state")
