"""
Install/acquire resolver

Turns a version selector into a buildx binary on disk, either downloaded
from a release or built from a git context, then installs it as a docker CLI
plugin or as a standalone binary on the search path.
"""

import logging
import os
import platform
import re
import shutil
import stat
import tempfile
import uuid
from typing import Optional

from .. import constants
from ..exceptions import InvalidVersionError, UnsupportedModeError
from ..exec import Exec
from ..git import resolve_commit, split_git_context
from ..github import GitHub, strip_selector_prefix
from ..rules import Version
from ..toolcache import ToolCache
from .args import get_build_args
from .buildx import Buildx

logger = logging.getLogger(__name__)

SYSTEM_MAP = {
    "Linux": "linux",
    "Darwin": "darwin",
    "Windows": "win32",
}

arm_machine_pattern = re.compile(r"^armv(\d+)")


def resolve_platform(system: Optional[str] = None) -> str:
    """OS name as used by release assets: `linux`, `darwin`, `win32`..."""
    system = system or platform.system()
    return SYSTEM_MAP.get(system, system.lower())


def resolve_cpu(machine: Optional[str] = None) -> str:
    machine = (machine or platform.machine()).lower()
    if arm_machine_pattern.match(machine) or machine == "arm":
        return "arm"
    return constants.MACHINE_ALIASES.get(machine, machine)


def resolve_arch(machine: Optional[str] = None, arm_version: Optional[str] = None) -> str:
    """
    Release asset arch: `x64` -> `amd64`, `ppc64` -> `ppc64le`,
    `arm` -> `arm-v<n>` (or `arm` if the variant is unknown), others as-is.
    """
    machine = machine or platform.machine()
    cpu = resolve_cpu(machine)
    if cpu == "arm":
        if arm_version is None:
            match = arm_machine_pattern.match(machine.lower())
            arm_version = match.group(1) if match else None
        return f"arm-v{arm_version}" if arm_version else "arm"
    return constants.ARCH_MAP.get(cpu, cpu)


def is_windows(system: Optional[str] = None) -> bool:
    return resolve_platform(system) == "win32"


def exe_suffix(system: Optional[str] = None) -> str:
    return ".exe" if is_windows(system) else ""


def filename(version: str, system: Optional[str] = None, machine: Optional[str] = None,
             arm_version: Optional[str] = None) -> str:
    """`buildx-v0.11.2.linux-amd64`, `buildx-v0.11.2.windows-arm64.exe`"""
    plat = "windows" if is_windows(system) else resolve_platform(system)
    arch = resolve_arch(machine, arm_version)
    return f"buildx-v{version}.{plat}-{arch}{exe_suffix(system)}"


class Installer:
    """
    Acquires and installs buildx binaries.

    Binaries are kept under their plugin name (`docker-buildx[.exe]`) in the
    tool directory returned by `download` and `build`.
    """

    def __init__(
        self,
        github: Optional[GitHub] = None,
        tool_cache: Optional[ToolCache] = None,
        exec_: Optional[Exec] = None,
        runtime=None,
        standalone: bool = False,
        tmp_dir: Optional[str] = None,
        system: Optional[str] = None,
        machine: Optional[str] = None,
    ):
        self.github = github or GitHub()
        self.system = system
        self.machine = machine
        self.tmp_dir = tmp_dir or tempfile.gettempdir()
        self.tool_cache = tool_cache or ToolCache(os.path.join(self.tmp_dir, "tool-cache"), resolve_cpu(machine))
        self.exec = exec_ or Exec()
        self.runtime = runtime
        self.standalone = standalone

    @property
    def plugin_bin_name(self) -> str:
        return f"{constants.PLUGIN_BIN_NAME}{exe_suffix(self.system)}"

    @property
    def standalone_bin_name(self) -> str:
        return f"{constants.STANDALONE_BIN_NAME}{exe_suffix(self.system)}"

    # ----------------------
    #
    #  Acquire
    #
    # ----------------------

    def download(self, selector: str, cache_binary: bool = True) -> str:
        """
        Download a release binary.

        Args:
            selector: `latest`, a tag, or a `cloud:`/`lab:` prefixed tag
            cache_binary: Look up and store the binary in the tool cache

        Returns:
            str: Directory holding the binary

        Raises:
            ReleaseNotFoundError: If the tag does not exist
            InvalidVersionError: If the release version is not semver
            DownloadError: If the asset cannot be fetched
        """
        with self.github:
            lab = selector.startswith(constants.CLOUD_VERSION_PREFIXES)
            release = self.github.get_release(selector)
            version = release.version
            if not Version.is_valid(version):
                raise InvalidVersionError(f'Invalid buildx version "{version}"')
            logger.info(f"[Install] Resolved {strip_selector_prefix(selector) or 'latest'} to buildx {version}")

            if cache_binary:
                cached = self.tool_cache.find(constants.TOOL_NAME, version)
                if cached:
                    logger.info(f"[Install] Using cached buildx {version} from {cached}")
                    return cached

            template = constants.LAB_DOWNLOAD_URL if lab else constants.DOWNLOAD_URL
            url = template.format(version=version, filename=filename(version, self.system, self.machine))
            download_path = self.github.download(url, os.path.join(self.tmp_dir, f"buildx-{uuid.uuid4()}"))
            return self._store(download_path, constants.TOOL_NAME, version, cache_binary)

    def build(self, git_context: str, cache_binary: bool = True) -> str:
        """
        Build buildx from a `repo#ref` git context.

        Returns:
            str: Directory holding the binary

        Raises:
            UnsupportedModeError: If neither standalone nor plugin buildx is available
        """
        repo, ref = split_git_context(git_context)
        commit = resolve_commit(repo, ref)
        logger.info(f"[Install] Building buildx from {repo}#{ref} ({commit})")

        if cache_binary:
            cached = self.tool_cache.find(constants.SOURCE_BUILD_CACHE_NAME, commit)
            if cached:
                logger.info(f"[Install] Using cached buildx {commit} from {cached}")
                return cached

        buildx = self._builder_buildx()
        output_dir = os.path.join(self.tmp_dir, constants.BUILD_OUTPUT_DIR)
        buildx.run(get_build_args(f"{repo}#{ref}", output_dir))
        built = os.path.join(output_dir, self.standalone_bin_name)
        return self._store(built, constants.SOURCE_BUILD_CACHE_NAME, commit, cache_binary)

    def _builder_buildx(self) -> Buildx:
        """Prefer the buildx of the current mode, fall back to the other one"""
        for standalone in (self.standalone, not self.standalone):
            buildx = Buildx(self.exec, standalone=standalone)
            if buildx.is_available():
                return buildx
        raise UnsupportedModeError("Neither standalone nor docker buildx is available to build from source")

    def _store(self, source: str, tool: str, version: str, cache_binary: bool) -> str:
        if cache_binary:
            return self.tool_cache.cache_file(source, self.plugin_bin_name, tool, version)
        tool_dir = os.path.join(self.tmp_dir, f"{tool}-{version}")
        os.makedirs(tool_dir, exist_ok=True)
        shutil.copyfile(source, os.path.join(tool_dir, self.plugin_bin_name))
        return tool_dir

    # ----------------------
    #
    #  Install
    #
    # ----------------------

    def install_plugin(self, tool_dir: str, dest: str) -> str:
        """
        Install as `<dest>/cli-plugins/docker-buildx[.exe]`, `dest` being the
        docker config home.
        """
        plugins_dir = os.path.join(dest, constants.CLI_PLUGINS_DIR)
        os.makedirs(plugins_dir, exist_ok=True)
        plugin_path = os.path.join(plugins_dir, self.plugin_bin_name)
        self._install(os.path.join(tool_dir, self.plugin_bin_name), plugin_path)
        logger.info(f"[Install] Docker plugin installed to {plugin_path}")
        return plugin_path

    def install_standalone(self, tool_dir: str, dest: str) -> str:
        """
        Install as `<dest>/bin/buildx[.exe]` and add `<dest>/bin` to the search path
        """
        bin_dir = os.path.join(dest, "bin")
        os.makedirs(bin_dir, exist_ok=True)
        bin_path = os.path.join(bin_dir, self.standalone_bin_name)
        self._install(os.path.join(tool_dir, self.plugin_bin_name), bin_path)
        if self.runtime is not None:
            self.runtime.add_path(bin_dir)
        logger.info(f"[Install] Binary installed to {bin_path}")
        return bin_path

    @staticmethod
    def _install(source: str, target: str):
        shutil.copyfile(source, target)
        logger.debug(f"[Install] Fixing perms of {target}")
        os.chmod(target, stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH)
