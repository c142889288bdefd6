import re
from typing import Union

from .version import Version


class Rule:
    """
        Class Rule used to describe a range of versions, like `>=0.3.0`
    """

    INTERVAL_REGEX = re.compile(r"^(\[|\()\s*(.+?)\s*,\s*(.+?)\s*(\]|\))$")

    # longest operators first so `>=` is not read as `>`
    OPERATORS = {
        '>=': lambda v, t: v >= t,
        '<=': lambda v, t: v <= t,
        '>': lambda v, t: v > t,
        '<': lambda v, t: v < t,
        '=': lambda v, t: v == t,
    }

    def __init__(self, rule_str: str):
        """
        - range: [1.0.0, 2.0.0], (1.0.0, 2.0.0), [1.0.0, 2.0.0), (1.0.0, 2.0.0]
        - compare: >=0.3.0, <0.11.0
        - equal: 0.4.1 or =0.4.1
        """
        self.rule_str = rule_str.strip()
        if not self.rule_str:
            raise ValueError("Empty version rule")
        self.check = self._parse_rule()

    def _parse_rule(self):
        """
            parse a rule
        """
        match = self.INTERVAL_REGEX.match(self.rule_str)

        if match:
            start_bracket, start_ver_str, end_ver_str, end_bracket = match.groups()

            start_ver = Version(start_ver_str)
            end_ver = Version(end_ver_str)

            lower = (lambda v: start_ver <= v) if start_bracket == '[' else (lambda v: start_ver < v)
            upper = (lambda v: v <= end_ver) if end_bracket == ']' else (lambda v: v < end_ver)
            return lambda v: lower(v) and upper(v)

        for op, func in self.OPERATORS.items():
            if self.rule_str.startswith(op):
                version_part = self.rule_str[len(op):].strip()
                target_version = Version(version_part)
                return lambda v: func(v, target_version)

        target_version = Version(self.rule_str)
        return lambda v: v == target_version

    def allows(self, version: Union[str, Version]) -> bool:
        """
            Like `in`, but also accepts a version string. Invalid versions are never allowed.
        """
        if isinstance(version, str):
            if not Version.is_valid(version):
                return False
            version = Version(version)
        return version in self

    def __contains__(self, version: Version) -> bool:
        """
            `version in rule`
        """
        if not isinstance(version, Version):
            return False
        return self.check(version)

    def __str__(self):
        return f"{self.rule_str}"

    def __repr__(self):
        return f"Rule('{self.rule_str}')"
