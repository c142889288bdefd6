import pytest
from click.testing import CliRunner

from setupbuildx import __version__, cli as cli_module
from setupbuildx.cli import cli
from setupbuildx.datacls import Builder, Node


class FakeBuildx:
    instances = []

    def __init__(self, standalone=False):
        self.standalone = standalone
        FakeBuildx.instances.append(self)

    def inspect(self, name=""):
        return Builder(name=name or "default", driver="docker", nodes=[Node(name="default", status="running")])

    def version(self):
        return "0.12.1"


@pytest.fixture
def runner(monkeypatch):
    FakeBuildx.instances = []
    monkeypatch.setattr(cli_module, "Buildx", FakeBuildx)
    return CliRunner()


class TestCli:

    def test_version_option(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_inspect(self, runner):
        result = runner.invoke(cli, ["inspect", "mybuilder", "--standalone"])
        assert result.exit_code == 0
        assert '"name": "mybuilder"' in result.output
        assert '"status": "running"' in result.output
        assert FakeBuildx.instances[0].standalone is True

    def test_buildx_version(self, runner):
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert result.output.strip() == "0.12.1"

    def test_missing_inputs_file_aborts(self, runner, tmp_path):
        result = runner.invoke(cli, ["run", "-c", str(tmp_path / "missing.yml")])
        assert result.exit_code == 1
        assert "Aborted" in result.output
