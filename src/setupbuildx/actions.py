"""
Pipeline runtime

Thin wrapper over the GitHub Actions runner protocol: inputs come from
`INPUT_*` variables, outputs/state/path are appended to the files the runner
exposes (`GITHUB_OUTPUT`, `GITHUB_STATE`, `GITHUB_PATH`), and log groups are
workflow commands. Outside a runner the legacy stdout commands are printed.
"""

import csv
import json
import logging
import os
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, List, MutableMapping, Optional, TextIO

from .exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "True", "TRUE")
FALSE_VALUES = ("false", "False", "FALSE")


def to_command_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


class Runtime:
    """Access to the runner environment for one step invocation"""

    def __init__(self, env: Optional[MutableMapping[str, str]] = None, stream: Optional[TextIO] = None):
        self.env = env if env is not None else os.environ
        self.stream = stream or sys.stdout

    # ----------------------
    #
    #  Inputs
    #
    # ----------------------

    @staticmethod
    def input_key(name: str) -> str:
        return f"INPUT_{name.replace(' ', '_').upper()}"

    def get_input(self, name: str, required: bool = False, trim: bool = True) -> str:
        value = self.env.get(self.input_key(name), "")
        if required and not value:
            raise ConfigValidationError(f"Input required and not supplied: {name}")
        return value.strip() if trim else value

    def get_boolean_input(self, name: str, default: Optional[bool] = None) -> bool:
        """
        Read a YAML 1.2 "core schema" boolean: true|True|TRUE or false|False|FALSE
        """
        value = self.get_input(name)
        if value == "" and default is not None:
            return default
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        raise ConfigValidationError(
            f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
            "Support boolean input list: `true | True | TRUE | false | False | FALSE`"
        )

    def get_input_list(self, name: str, ignore_comma: bool = False, quote: bool = True) -> List[str]:
        return parse_input_list(self.get_input(name), ignore_comma=ignore_comma, quote=quote)

    # ----------------------
    #
    #  Outputs, state and path
    #
    # ----------------------

    def set_output(self, name: str, value: Any):
        logger.debug(f"Output {name}={to_command_value(value)}")
        self._file_command("GITHUB_OUTPUT", "set-output", name, value)

    def save_state(self, name: str, value: Any):
        self._file_command("GITHUB_STATE", "save-state", name, value)

    def get_state(self, name: str) -> str:
        return self.env.get(f"STATE_{name}", "")

    def add_path(self, path: str):
        path_file = self.env.get("GITHUB_PATH")
        if path_file:
            with open(path_file, "a", encoding="utf-8") as f:
                f.write(f"{path}{os.linesep}")
        else:
            self._issue("add-path", path)
        self.env["PATH"] = f"{path}{os.pathsep}{self.env.get('PATH', '')}"

    def is_debug(self) -> bool:
        return self.env.get("RUNNER_DEBUG") == "1"

    @contextmanager
    def group(self, name: str) -> Iterator[None]:
        """Fold everything logged inside the block under `name`"""
        self._issue("group", name)
        try:
            yield
        finally:
            self._issue("endgroup", "")

    def _file_command(self, file_var: str, legacy: str, name: str, value: Any):
        path = self.env.get(file_var)
        value = to_command_value(value)
        if path:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            if delimiter in name or delimiter in value:
                raise ValueError(f"Unexpected input: value should not contain the delimiter '{delimiter}'")
            with open(path, "a", encoding="utf-8") as f:
                f.write(f"{name}<<{delimiter}{os.linesep}{value}{os.linesep}{delimiter}{os.linesep}")
            return
        self._issue(f"{legacy} name={name}", value)

    def _issue(self, command: str, message: str):
        self.stream.write(f"::{command}::{message}{os.linesep}")
        self.stream.flush()


def parse_input_list(items: str, ignore_comma: bool = False, quote: bool = True) -> List[str]:
    """
    Split a multi-line (and, unless `ignore_comma`, comma separated) input
    into its trimmed, non-empty entries. Lines are read as CSV records so
    quoted values may contain commas.
    """
    res: List[str] = []
    if items == "":
        return res
    reader = csv.reader(
        items.splitlines(),
        quoting=csv.QUOTE_MINIMAL if quote else csv.QUOTE_NONE,
        skipinitialspace=False,
    )
    for record in reader:
        if not record:
            continue
        if len(record) == 1:
            if ignore_comma:
                res.append(record[0])
            else:
                res.extend(record[0].split(","))
            continue
        if not ignore_comma:
            res.extend(record)
            continue
        res.append(",".join(record))
    return [item.strip() for item in res if item and item.strip()]
