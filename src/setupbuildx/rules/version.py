from functools import total_ordering
from typing import Optional
import re


@total_ordering
class Version:
    """
        Class describe a semantic version of buildx or BuildKit
    """
    # 1:Major, 2:Minor, 3:Patch, 4:Prerelease, 5:Build
    SEMVER_REGEX = re.compile(
        r"^(?P<major>0|[1-9]\d*)\."
        r"(?P<minor>0|[1-9]\d*)\."
        r"(?P<patch>0|[1-9]\d*)"
        r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
        r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
        r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
    )

    def __init__(self, version_str: str):
        self.version_str = version_str
        cleaned = self.clean(version_str)

        match = self.SEMVER_REGEX.match(cleaned) if cleaned is not None else None
        if not match:
            raise ValueError(f"Unrecognized Version '{version_str}'")

        parts = match.groupdict()
        self.core = (int(parts['major']), int(parts['minor']), int(parts['patch']))
        self.prerelease = self._parse_prerelease(parts.get('prerelease'))
        self.build = parts.get('build')

    @staticmethod
    def clean(version_str: str) -> Optional[str]:
        """
            strip whitespace and a leading `v` or `=`, like `v0.4.1` -> `0.4.1`
        """
        if version_str is None:
            return None
        cleaned = version_str.strip()
        cleaned = re.sub(r"^[=v]+", "", cleaned)
        return cleaned or None

    @classmethod
    def is_valid(cls, version_str: str) -> bool:
        try:
            cls(version_str)
        except (TypeError, ValueError):
            return False
        return True

    def _parse_prerelease(self, prerelease_str):
        if prerelease_str is None:
            return None
        parts = []
        for part in prerelease_str.split('.'):
            parts.append(int(part) if part.isdigit() else part)
        return tuple(parts)

    def __str__(self):
        return self.version_str

    def __repr__(self):
        return f"Version('{self.version_str}')"

    def __hash__(self):
        return hash((self.core, self.prerelease))

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        # build metadata does not take part in precedence
        return self.core == other.core and self.prerelease == other.prerelease

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented

        if self.core != other.core:
            return self.core < other.core

        if self.prerelease is None and other.prerelease is not None:
            return False
        if self.prerelease is not None and other.prerelease is None:
            return True

        if self.prerelease is not None:
            return self._prerelease_key(self.prerelease) < self._prerelease_key(other.prerelease)

        return False

    @staticmethod
    def _prerelease_key(prerelease):
        # numeric identifiers sort before alphanumeric ones
        return tuple((0, p, "") if isinstance(p, int) else (1, 0, p) for p in prerelease)
