"""
setup-buildx Utils Module

- logger: Logging setup and configuration
- util: URL/ref predicates and small text helpers

Usage:
    from setupbuildx.utils import setup_logger, is_valid_ref
"""

from .logger import setup_logger, parse_module_levels, in_github_actions
from .util import is_valid_url, is_valid_ref, is_commit_sha, is_short_hash, last_line, uniq

__all__ = [
    'setup_logger',
    'parse_module_levels',
    'in_github_actions',
    'is_valid_url',
    'is_valid_ref',
    'is_commit_sha',
    'is_short_hash',
    'last_line',
    'uniq',
]
