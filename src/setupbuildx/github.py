"""
Release metadata and asset downloads

The release index is a JSON document mapping tags (and `latest`) to
`{id, tag_name, html_url}`.
"""

import logging
import os
from typing import Any, Dict, Optional

import httpx

from . import constants
from .datacls import GitHubRelease
from .exceptions import DownloadError, ReleaseNotFoundError

logger = logging.getLogger(__name__)

USER_AGENT = "setup-buildx"


def releases_url(selector: str) -> str:
    if selector.startswith(constants.CLOUD_VERSION_PREFIXES):
        return constants.LAB_RELEASES_URL
    return constants.RELEASES_URL


def strip_selector_prefix(selector: str) -> str:
    """`cloud:latest` -> `latest`, `lab:v0.12.1-desktop.1` -> `v0.12.1-desktop.1`"""
    for prefix in constants.CLOUD_VERSION_PREFIXES:
        if selector.startswith(prefix):
            return selector[len(prefix):]
    return selector


class GitHub:
    """HTTP access to the release index and release assets"""

    def __init__(self, client: Optional[httpx.Client] = None):
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(follow_redirects=True, headers={"User-Agent": USER_AGENT})
        return self._client

    def close(self):
        """Close the client this instance created; an injected client is left to its owner"""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "GitHub":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def get_releases(self, url: str) -> Dict[str, Any]:
        """
        Raises:
            DownloadError: If the index cannot be fetched or is not a JSON object
        """
        logger.debug(f"[GitHub] Fetching release index {url}")
        try:
            response = self.client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise DownloadError(f"Cannot fetch release index {url}: {e}") from e
        except ValueError as e:
            raise DownloadError(f"Release index {url} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise DownloadError(f"Release index {url} is not a JSON object")
        return data

    def get_release(self, selector: str) -> GitHubRelease:
        """
        Resolve a version selector (`latest`, `v0.11.2`, `0.11.2`, `cloud:latest`)
        to a release descriptor.

        Raises:
            ReleaseNotFoundError: If the tag is not in the index
        """
        url = releases_url(selector)
        tag = strip_selector_prefix(selector) or "latest"
        releases = self.get_releases(url)
        candidates = [tag] if tag == "latest" or tag.startswith("v") else [f"v{tag}", tag]
        for candidate in candidates:
            if candidate in releases:
                release = GitHubRelease.model_validate(releases[candidate])
                logger.debug(f"[GitHub] Release found: {release.tag_name}")
                return release
        raise ReleaseNotFoundError(tag, url)

    def download(self, url: str, dest: str) -> str:
        """
        Stream `url` into `dest`.

        Raises:
            DownloadError: On any transport or HTTP status error
        """
        logger.info(f"[GitHub] Downloading {url}")
        os.makedirs(os.path.dirname(dest) or ".", exist_ok=True)
        try:
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                with open(dest, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
        except httpx.HTTPError as e:
            raise DownloadError(f"Cannot download {url}: {e}") from e
        logger.debug(f"[GitHub] Downloaded to {dest}")
        return dest
