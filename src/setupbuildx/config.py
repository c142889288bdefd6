import os
import uuid
import logging
import tempfile
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import constants
from .actions import Runtime, parse_input_list
from .datacls import Node
from .exceptions import (
    ConfigFileMissingError,
    ConfigParsingError,
    ConfigValidationError,
)


logger = logging.getLogger(__name__)

# input name -> legacy input name still honoured
LEGACY_INPUTS = {
    "buildkitd-config": "config",
    "buildkitd-config-inline": "config-inline",
}

STRING_INPUTS = [
    "version", "name", "driver", "buildkitd-flags", "buildkitd-config",
    "buildkitd-config-inline", "endpoint", "append",
]
BOOLEAN_INPUTS = ["install", "use", "keep-state", "cache-binary", "cleanup"]


class InputsModel(BaseModel):
    """
        Class Config-Validation Model describe the step inputs
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    version: str = ""
    name: str = ""
    driver: str = constants.DEFAULT_DRIVER
    driver_opts: List[str] = Field(default_factory=list, alias="driver-opts")
    buildkitd_flags: str = Field("", alias="buildkitd-flags")
    buildkitd_config: str = Field("", alias="buildkitd-config")
    buildkitd_config_inline: str = Field("", alias="buildkitd-config-inline")
    platforms: List[str] = Field(default_factory=list)
    install: bool = False
    use: bool = True
    endpoint: str = ""
    append: str = ""
    keep_state: bool = Field(False, alias="keep-state")
    cache_binary: bool = Field(True, alias="cache-binary")
    cleanup: bool = True

    @field_validator("driver_opts", mode="before")
    @classmethod
    def split_driver_opts(cls, value: Any) -> Any:
        """One option per line, commas belong to the option"""
        if isinstance(value, str):
            return parse_input_list(value, ignore_comma=True, quote=False)
        return value

    @field_validator("platforms", mode="before")
    @classmethod
    def split_platforms(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_input_list(value)
        return value

    @field_validator("append", mode="before")
    @classmethod
    def dump_append(cls, value: Any) -> Any:
        """A YAML file may inline the node list instead of a string"""
        if isinstance(value, list):
            return yaml.safe_dump(value, sort_keys=False)
        return value

    @field_validator("driver", mode="before")
    @classmethod
    def default_driver(cls, value: Any) -> Any:
        return value or constants.DEFAULT_DRIVER

    def tool_version(self) -> str:
        """
        Selector actually installed. The cloud driver needs the lab build of
        buildx: `latest` -> `cloud:latest`, `v0.12.1` -> `cloud:v0.12.1`.
        """
        if self.driver != constants.DRIVER_CLOUD:
            return self.version
        if not self.version or self.version == "latest":
            return "cloud:latest"
        if self.version.startswith(constants.CLOUD_VERSION_PREFIXES):
            return self.version
        return f"cloud:{self.version}"

    def append_nodes(self) -> List[Node]:
        return parse_append(self.append)


def parse_append(text: str) -> List[Node]:
    """
    Parse the `append` input, a YAML list of nodes.

    Raises:
        ConfigParsingError: If the text is not YAML or not a list
        ConfigValidationError: If an entry is not a valid node
    """
    if not text or not text.strip():
        return []
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigParsingError(f"Error parsing append input: {e}")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ConfigParsingError("The append input must be a YAML list of nodes.")
    nodes = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigValidationError(f"Append node #{i} must be a mapping, got {type(entry).__name__}.")
        try:
            nodes.append(Node.model_validate(entry))
        except ValidationError as e:
            raise ConfigValidationError(f"Append node #{i} validation failed:\n{e}")
    return nodes


class Config:
    """
    Loads and validates the step inputs, either from the runner (`INPUT_*`)
    or from a YAML file. It is the sole gatekeeper for configuration.
    """
    def __init__(
        self,
        runtime: Optional[Runtime] = None,
        config_path: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        docker=None,
    ):
        self.runtime = runtime or Runtime()
        self.env = env if env is not None else self.runtime.env
        self.path = config_path
        self.docker = docker

        if config_path:
            logger.info(f"Loading inputs from '{config_path}'...")
            raw_data = self._load_raw_config()
        else:
            logger.debug("Loading inputs from the runner environment...")
            raw_data = self._read_inputs()

        try:
            model = InputsModel.model_validate(raw_data)
        except ValidationError as e:
            raise ConfigValidationError(f"Inputs validation failed:\n{e}")

        self.inputs = model.model_copy(update={"name": self._builder_name(model)})
        logger.debug(f"Inputs validated: \n{self.inputs.model_dump_json(indent=2, by_alias=True)}")

    def _load_raw_config(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigFileMissingError(f"Inputs file not found at: {self.path}")
        except yaml.YAMLError as e:
            raise ConfigParsingError(f"Error parsing YAML file: {e}")
        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigParsingError("Inputs file must be a YAML document containing a dictionary.")
        for name, legacy in LEGACY_INPUTS.items():
            if legacy in config_data:
                value = config_data.pop(legacy)
                config_data.setdefault(name, value)
        return config_data

    def _read_inputs(self) -> Dict[str, Any]:
        runtime = self.runtime
        raw: Dict[str, Any] = {}
        for name in STRING_INPUTS:
            value = runtime.get_input(name)
            if not value and name in LEGACY_INPUTS:
                value = runtime.get_input(LEGACY_INPUTS[name])
            if value:
                raw[name] = value
        raw["driver-opts"] = runtime.get_input_list("driver-opts", ignore_comma=True, quote=False)
        raw["platforms"] = runtime.get_input_list("platforms")
        for name in BOOLEAN_INPUTS:
            if runtime.get_input(name):
                raw[name] = runtime.get_boolean_input(name)
        return raw

    def _builder_name(self, model: InputsModel) -> str:
        """Builder name: the docker context for the docker driver, else the input or a random one"""
        if model.driver == constants.DRIVER_DOCKER and self.docker is not None:
            return self.docker.context()
        return model.name or f"{constants.BUILDER_NAME_PREFIX}{uuid.uuid4()}"

    # ----------------------
    #
    #  Environment settings
    #
    # ----------------------

    @property
    def docker_config_home(self) -> str:
        return self.env.get("DOCKER_CONFIG") or os.path.join(os.path.expanduser("~"), ".docker")

    @property
    def buildx_config_dir(self) -> str:
        return self.env.get("BUILDX_CONFIG") or os.path.join(self.docker_config_home, "buildx")

    @property
    def certs_dir(self) -> str:
        return os.path.join(self.buildx_config_dir, constants.CERTS_DIR)

    @property
    def tmp_dir(self) -> str:
        return self.env.get("RUNNER_TEMP") or tempfile.gettempdir()

    @property
    def tool_cache_dir(self) -> str:
        return self.env.get("RUNNER_TOOL_CACHE") or os.path.join(self.buildx_config_dir, ".bin", "cache")
