import io
import re
from pathlib import Path

import pytest
import yaml

from setupbuildx.actions import Runtime
from setupbuildx.config import Config, InputsModel, parse_append
from setupbuildx.exceptions import (
    ConfigFileMissingError,
    ConfigParsingError,
    ConfigValidationError,
)

RANDOM_NAME = re.compile(r"^builder-[0-9a-f-]{36}$")


@pytest.fixture
def create_config_file(tmp_path: Path):
    """A pytest fixture to create a temporary inputs.yml file."""
    def _create_file(config_data: dict) -> Path:
        config_file = tmp_path / "inputs.yml"
        with open(config_file, 'w') as f:
            yaml.dump(config_data, f)
        return config_file
    return _create_file


@pytest.fixture
def make_runtime():
    """Runtime over a plain dict of INPUT_* variables"""
    def _make(inputs: dict) -> Runtime:
        env = {Runtime.input_key(name): value for name, value in inputs.items()}
        return Runtime(env=env, stream=io.StringIO())
    return _make


class FakeDocker:
    def __init__(self, context="mycontext"):
        self._context = context

    def context(self):
        return self._context


class TestRunnerInputs:
    """Inputs read from INPUT_* variables."""

    def test_defaults(self, make_runtime):
        """Nothing set gives the documented defaults and a random builder name."""
        inputs = Config(make_runtime({})).inputs
        assert inputs.version == ""
        assert inputs.driver == "docker-container"
        assert inputs.driver_opts == []
        assert inputs.platforms == []
        assert inputs.install is False
        assert inputs.use is True
        assert inputs.keep_state is False
        assert inputs.cache_binary is True
        assert inputs.cleanup is True
        assert RANDOM_NAME.match(inputs.name)

    def test_all_inputs(self, make_runtime):
        runtime = make_runtime({
            "version": "v0.12.1",
            "name": "mybuilder",
            "driver": "docker-container",
            "driver-opts": "image=moby/buildkit:master\nnetwork=host",
            "buildkitd-flags": "--debug",
            "platforms": "linux/amd64,linux/arm64\nlinux/riscv64",
            "install": "true",
            "use": "false",
            "endpoint": "tcp://graviton2:1234",
            "keep-state": "TRUE",
            "cache-binary": "False",
            "cleanup": "false",
        })
        inputs = Config(runtime).inputs
        assert inputs.version == "v0.12.1"
        assert inputs.name == "mybuilder"
        assert inputs.driver_opts == ["image=moby/buildkit:master", "network=host"]
        assert inputs.buildkitd_flags == "--debug"
        assert inputs.platforms == ["linux/amd64", "linux/arm64", "linux/riscv64"]
        assert inputs.install is True
        assert inputs.use is False
        assert inputs.endpoint == "tcp://graviton2:1234"
        assert inputs.keep_state is True
        assert inputs.cache_binary is False
        assert inputs.cleanup is False

    def test_driver_opts_keep_commas(self, make_runtime):
        runtime = make_runtime({"driver-opts": 'env.no_proxy=localhost,127.0.0.1\n"image=moby/buildkit:master"'})
        assert Config(runtime).inputs.driver_opts == [
            "env.no_proxy=localhost,127.0.0.1",
            '"image=moby/buildkit:master"',
        ]

    def test_invalid_boolean(self, make_runtime):
        with pytest.raises(ConfigValidationError, match="YAML 1.2"):
            Config(make_runtime({"install": "yes"}))

    @pytest.mark.parametrize("name, legacy", [
        ("buildkitd-config", "config"),
        ("buildkitd-config-inline", "config-inline"),
    ])
    def test_legacy_inputs(self, make_runtime, name, legacy):
        inputs = Config(make_runtime({legacy: "debug = true"})).inputs
        assert getattr(inputs, name.replace("-", "_")) == "debug = true"

    def test_new_input_wins_over_legacy(self, make_runtime):
        runtime = make_runtime({"buildkitd-config": "/new.toml", "config": "/old.toml"})
        assert Config(runtime).inputs.buildkitd_config == "/new.toml"

    def test_empty_driver_is_default(self, make_runtime):
        assert Config(make_runtime({"driver": ""})).inputs.driver == "docker-container"

    def test_docker_driver_uses_context_name(self, make_runtime):
        """The docker driver builder is the current docker context."""
        config = Config(make_runtime({"driver": "docker", "name": "ignored"}), docker=FakeDocker("desktop-linux"))
        assert config.inputs.name == "desktop-linux"


class TestFileInputs:
    """Inputs loaded from a YAML file."""

    def test_load_valid_file(self, create_config_file, make_runtime):
        config_path = create_config_file({
            "name": "from-file",
            "driver-opts": ["network=host"],
            "platforms": "linux/amd64,linux/arm64",
            "install": True,
            "append": [
                {"name": "aws_graviton2", "endpoint": "tcp://graviton2:1234", "platforms": "linux/arm64"},
            ],
        })
        config = Config(make_runtime({}), config_path=str(config_path))
        inputs = config.inputs
        assert inputs.name == "from-file"
        assert inputs.driver_opts == ["network=host"]
        assert inputs.platforms == ["linux/amd64", "linux/arm64"]
        assert inputs.install is True
        nodes = inputs.append_nodes()
        assert [node.name for node in nodes] == ["aws_graviton2"]
        assert nodes[0].platforms == "linux/arm64"

    def test_legacy_keys_in_file(self, create_config_file, make_runtime):
        config_path = create_config_file({"config-inline": "debug = true"})
        config = Config(make_runtime({}), config_path=str(config_path))
        assert config.inputs.buildkitd_config_inline == "debug = true"

    def test_file_not_found(self, make_runtime):
        with pytest.raises(ConfigFileMissingError):
            Config(make_runtime({}), config_path="non_existent_file.yml")

    def test_invalid_yaml(self, tmp_path, make_runtime):
        config_file = tmp_path / "invalid.yml"
        config_file.write_text("key: value: another")
        with pytest.raises(ConfigParsingError, match="Error parsing YAML file"):
            Config(make_runtime({}), config_path=str(config_file))

    def test_not_a_mapping(self, tmp_path, make_runtime):
        config_file = tmp_path / "list.yml"
        config_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigParsingError, match="dictionary"):
            Config(make_runtime({}), config_path=str(config_file))

    def test_unknown_key(self, create_config_file, make_runtime):
        config_path = create_config_file({"drivr": "docker"})
        with pytest.raises(ConfigValidationError, match="drivr"):
            Config(make_runtime({}), config_path=str(config_path))

    def test_empty_file(self, tmp_path, make_runtime):
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")
        assert Config(make_runtime({}), config_path=str(config_file)).inputs.driver == "docker-container"


class TestAppend:

    def test_parse_nodes(self):
        nodes = parse_append("""
- name: aws_graviton2
  endpoint: tcp://graviton2:1234
  driver-opts:
    - image=moby/buildkit:master
  buildkitd-flags: --allow-insecure-entitlement security.insecure
  platforms: linux/arm64,linux/riscv64
- endpoint: ssh://me@host
""")
        assert nodes[0].dump() == {
            "name": "aws_graviton2",
            "endpoint": "tcp://graviton2:1234",
            "driver-opts": ["image=moby/buildkit:master"],
            "buildkitd-flags": "--allow-insecure-entitlement security.insecure",
            "platforms": "linux/arm64,linux/riscv64",
        }
        assert nodes[1].dump() == {"endpoint": "ssh://me@host"}

    @pytest.mark.parametrize("text", ["", "   \n", "~"])
    def test_empty(self, text):
        assert parse_append(text) == []

    def test_not_a_list(self):
        with pytest.raises(ConfigParsingError, match="list"):
            parse_append("name: foo")

    def test_bad_yaml(self):
        with pytest.raises(ConfigParsingError):
            parse_append("- name: [unclosed")

    def test_entry_not_a_mapping(self):
        with pytest.raises(ConfigValidationError, match="#1"):
            parse_append("- name: ok\n- just-a-string\n")


class TestToolVersion:

    @pytest.mark.parametrize("driver, version, expected", [
        ("docker-container", "", ""),
        ("docker-container", "v0.12.1", "v0.12.1"),
        ("cloud", "", "cloud:latest"),
        ("cloud", "latest", "cloud:latest"),
        ("cloud", "v0.12.1-desktop.2", "cloud:v0.12.1-desktop.2"),
        ("cloud", "lab:latest", "lab:latest"),
    ])
    def test_selector(self, driver, version, expected):
        inputs = InputsModel.model_validate({"driver": driver, "version": version})
        assert inputs.tool_version() == expected


class TestEnvironmentSettings:

    def test_from_env(self, runner_env, runtime):
        config = Config(runtime)
        assert config.docker_config_home == runner_env["DOCKER_CONFIG"]
        assert config.buildx_config_dir == f"{runner_env['DOCKER_CONFIG']}/buildx"
        assert config.certs_dir == f"{runner_env['DOCKER_CONFIG']}/buildx/certs"
        assert config.tmp_dir == runner_env["RUNNER_TEMP"]
        assert config.tool_cache_dir == runner_env["RUNNER_TOOL_CACHE"]

    def test_buildx_config_override(self, runner_env, runtime):
        runner_env["BUILDX_CONFIG"] = "/opt/buildx"
        assert Config(runtime).buildx_config_dir == "/opt/buildx"
