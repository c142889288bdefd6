"""
setup-buildx data classes

- Builder, Node: parsed `buildx inspect` state and `append` entries
- GitHubRelease: release descriptor
"""

from .builder import Builder, Node
from .release import GitHubRelease

__all__ = [
    'Builder',
    'Node',
    'GitHubRelease',
]
