"""
setup-buildx Rules Module

- Rule: Rule for version range handling
- Version: Semantic version handling

Usage:
    from setupbuildx.rules import Rule, Version
"""

from .rule import Rule
from .version import Version

__all__ = [
    'Rule',
    'Version',
]
