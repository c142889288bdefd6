"""
Some utils for setup-buildx
"""

import re
from typing import Iterable, List
from urllib.parse import urlparse

from .. import constants

hex_ref_pattern = re.compile(r'^[0-9a-fA-F]{40}$')
short_hash_pattern = re.compile(r'^[0-9a-f]{7,40}$')


def is_valid_url(url: str) -> bool:
    """
    Whether `url` is an absolute http(s) URL.
    Selectors like `cloud:latest` parse as URLs too, so other schemes are rejected.
    """
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_valid_ref(ref: str) -> bool:
    """
    Whether a version selector points at a git repository (`repo#ref`)
    """
    if is_valid_url(ref):
        return True
    return ref.startswith(constants.GIT_REF_PREFIXES)


def is_commit_sha(ref: str) -> bool:
    return bool(hex_ref_pattern.match(ref))


def is_short_hash(ref: str) -> bool:
    return bool(short_hash_pattern.match(ref))


def last_line(text: str) -> str:
    """
    Last non-blank line of a process output, used as a one-line error message
    """
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    return lines[-1] if lines else "unknown error"


def uniq(items: Iterable[str]) -> List[str]:
    """
    De-duplicate while keeping first-seen order
    """
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen
