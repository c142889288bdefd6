import logging

import pytest

from setupbuildx.utils.logger import WorkflowCommandFormatter, _normalize_module_name, parse_module_levels


class TestModuleLevels:

    @pytest.mark.parametrize("spec, expected", [
        (None, None),
        ("", None),
        ("inst=debug", {"inst": "DEBUG"}),
        ("inst=DEBUG, lc=info,broken,", {"inst": "DEBUG", "lc": "INFO"}),
    ])
    def test_parse(self, spec, expected):
        assert parse_module_levels(spec) == expected

    @pytest.mark.parametrize("name, expected", [
        ("inst", "setupbuildx.buildx.install"),
        ("lc", "setupbuildx.lifecycle"),
        ("buildx.*", "setupbuildx.buildx"),
        ("auth", "setupbuildx.auth"),
        ("setupbuildx.github", "setupbuildx.github"),
        ("urllib3", "urllib3"),
    ])
    def test_normalize(self, name, expected):
        assert _normalize_module_name(name) == expected


class TestWorkflowCommandFormatter:

    def _record(self, level, msg):
        return logging.LogRecord("setupbuildx", level, __file__, 1, msg, None, None)

    def test_info_is_plain(self):
        assert WorkflowCommandFormatter("%(message)s").format(self._record(logging.INFO, "hello")) == "hello"

    def test_warning_is_annotation(self):
        formatted = WorkflowCommandFormatter("%(message)s").format(self._record(logging.WARNING, "a\nb 100%"))
        assert formatted == "::warning::a%0Ab 100%25"
