"""
Local tool cache

Same layout as the hosted runner cache, so binaries cached by previous jobs
are found again:

    <root>/<tool>/<version>/<arch>/<binary>
    <root>/<tool>/<version>/<arch>.complete
"""

import logging
import os
import shutil
from typing import Optional

logger = logging.getLogger(__name__)


class ToolCache:
    """Versioned binary cache rooted at `root`"""

    def __init__(self, root: str, arch: str):
        self.root = root
        self.arch = arch

    def _dir(self, tool: str, version: str) -> str:
        return os.path.join(self.root, tool, version, self.arch)

    def _marker(self, tool: str, version: str) -> str:
        return f"{self._dir(tool, version)}.complete"

    def find(self, tool: str, version: str) -> Optional[str]:
        """Directory of a completely cached tool version, None otherwise"""
        path = self._dir(tool, version)
        if os.path.isdir(path) and os.path.isfile(self._marker(tool, version)):
            logger.debug(f"[ToolCache] Found {tool} {version} in {path}")
            return path
        logger.debug(f"[ToolCache] {tool} {version} not cached")
        return None

    def cache_file(self, source: str, target_name: str, tool: str, version: str) -> str:
        """
        Copy `source` into the cache as `target_name` and mark the entry complete.

        Returns:
            str: The cache directory holding the binary
        """
        path = self._dir(tool, version)
        marker = self._marker(tool, version)
        if os.path.exists(marker):
            os.remove(marker)
        os.makedirs(path, exist_ok=True)
        shutil.copyfile(source, os.path.join(path, target_name))
        with open(marker, "w", encoding="utf-8"):
            pass
        logger.debug(f"[ToolCache] Cached {tool} {version} in {path}")
        return path
