import pytest

from setupbuildx.buildx.version import capabilities, parse_version, satisfies
from setupbuildx.exceptions import ParseError


class TestParseVersion:

    @pytest.mark.parametrize("banner, expected", [
        ("github.com/docker/buildx 0.4.1+azure bda4882a65349ca359216b135896bddc1d92461c", "0.4.1"),
        ("github.com/docker/buildx v0.4.1 bda4882a65349ca359216b135896bddc1d92461c", "0.4.1"),
        ("github.com/docker/buildx v0.4.2 fb7b670b764764dc4716df3eba07ffdae4cc47b2", "0.4.2"),
        ("github.com/docker/buildx f117971 f11797113e5a9b86bd976329c5dbb8a8bfdfadfa", "f117971"),
        ("github.com/docker/buildx v0.11.2 9872040b6626fb7d87ef7296fd5b832e8cc2ad17\n", "0.11.2"),
    ])
    def test_banners(self, banner, expected):
        assert parse_version(banner) == expected

    @pytest.mark.parametrize("banner", ["", "buildx", "github.com/docker/buildx vX.Y"])
    def test_unrecognized_banner(self, banner):
        with pytest.raises(ParseError) as exc_info:
            parse_version(banner)
        assert exc_info.value.raw == banner


class TestSatisfies:

    @pytest.mark.parametrize("version, range_, expected", [
        ("0.4.1", ">=0.3.2", True),
        ("bda4882a65349ca359216b135896bddc1d92461c", ">0.1.0", False),
        ("f117971", ">0.6.0", True),
        ("f117971", "<0.1.0", True),
        ("bda4882", ">0.1.0", True),
        ("0.2.0", ">=0.3.0", False),
        ("0.11.0", "<0.11.0", False),
        ("0.10.5", "<0.11.0", True),
    ])
    def test_satisfies(self, version, range_, expected):
        assert satisfies(version, range_) is expected


class TestCapabilities:

    @pytest.mark.parametrize("version, driver_opts, builder_flag, explicit_node_name", [
        ("0.2.2", False, False, True),
        ("0.3.0", True, False, True),
        ("0.3.1", True, False, True),
        ("0.4.0", True, True, True),
        ("0.10.5", True, True, True),
        ("0.11.0", True, True, False),
        ("0.12.1", True, True, False),
        ("f117971", True, True, True),
    ])
    def test_gate_boundaries(self, version, driver_opts, builder_flag, explicit_node_name):
        caps = capabilities(version)
        assert caps.supports_driver_opts is driver_opts
        assert caps.supports_builder_flag is builder_flag
        assert caps.requires_explicit_append_node_name is explicit_node_name
