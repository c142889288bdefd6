"""
Lifecycle orchestrator

Main phase:
    uninitialized -> tool resolved -> builder created -> nodes appended
    -> bootstrapped -> default installed -> inspected -> reported

Teardown phase (separate invocation, driven by the persisted RunState):
    builder removed -> temp context removed -> certs dir removed

Main phase failures abort the run. Teardown failures are logged as warnings
and the remaining steps still run.
"""

import logging
import os
import shutil
import tempfile
import uuid
from enum import Enum
from typing import List, Optional

from . import constants
from .actions import Runtime
from .auth import CredentialSource, set_credentials
from .buildkit import BuildkitConfig, get_buildkit_version
from .buildx import Buildx, Installer, get_append_args, get_create_args, get_inspect_args, get_rm_args
from .buildx.install import resolve_cpu
from .config import Config
from .datacls import Builder
from .docker import Docker
from .exceptions import SetupBuildxError, UnsupportedModeError
from .exec import Exec
from .state import RunState
from .toolcache import ToolCache
from .utils.util import is_short_hash, is_valid_ref

logger = logging.getLogger(__name__)


class Phase(Enum):
    UNINITIALIZED = "uninitialized"
    TOOL_RESOLVED = "tool-resolved"
    BUILDER_CREATED = "builder-created"
    NODES_APPENDED = "nodes-appended"
    BOOTSTRAPPED = "bootstrapped"
    DEFAULT_INSTALLED = "default-installed"
    INSPECTED = "inspected"
    REPORTED = "reported"
    BUILDER_REMOVED = "builder-removed"
    TEMP_CONTEXT_REMOVED = "temp-context-removed"
    CERTS_DIR_REMOVED = "certs-dir-removed"


class Lifecycle:
    """
    Runs the two phases of the step against injected collaborators
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        runtime: Optional[Runtime] = None,
        exec_: Optional[Exec] = None,
        docker: Optional[Docker] = None,
        installer: Optional[Installer] = None,
        credentials: Optional[CredentialSource] = None,
    ):
        self.config = config
        self.runtime = runtime or (config.runtime if config is not None else Runtime())
        self.exec = exec_ or Exec()
        self.docker = docker or Docker(self.exec)
        self._installer = installer
        self.credentials = credentials
        self.phase = Phase.UNINITIALIZED
        self.standalone = False
        self.buildx: Optional[Buildx] = None
        self._tmp_dir: Optional[str] = None

    def _advance(self, phase: Phase):
        logger.debug(f"[Lifecycle] {self.phase.value} -> {phase.value}")
        self.phase = phase

    @property
    def tmp_dir(self) -> str:
        """Per-run scratch directory under the runner temp dir"""
        if self._tmp_dir is None:
            base = self.config.tmp_dir
            os.makedirs(base, exist_ok=True)
            self._tmp_dir = tempfile.mkdtemp(prefix="setup-buildx-", dir=base)
        return self._tmp_dir

    @property
    def installer(self) -> Installer:
        if self._installer is None:
            self._installer = Installer(
                tool_cache=ToolCache(self.config.tool_cache_dir, resolve_cpu()),
                exec_=self.exec,
                runtime=self.runtime,
                standalone=self.standalone,
                tmp_dir=self.tmp_dir,
            )
        return self._installer

    # ----------------------
    #
    #  Main phase
    #
    # ----------------------

    def run(self) -> Builder:
        """
        Provision the builder and report its outputs.

        Returns:
            Builder: The inspected builder

        Raises:
            SetupBuildxError: Any failure aborts the remaining steps
        """
        inputs = self.config.inputs
        runtime = self.runtime
        state = RunState(cleanup=inputs.cleanup, keep_state=inputs.keep_state)
        state.save(runtime, "cleanup", "keep_state")

        self.standalone = not self.docker.is_available()
        state.standalone = self.standalone
        state.save(runtime, "standalone")
        logger.info(f"[Lifecycle] Standalone mode: {self.standalone}")

        if not self.standalone:
            self._print_docker_info()

        self.buildx = Buildx(self.exec, standalone=self.standalone)
        self._resolve_tool()
        self._advance(Phase.TOOL_RESOLVED)

        with runtime.group("Buildx version"):
            self.buildx.print_version()
        version = self.buildx.version()

        runtime.set_output("name", inputs.name)
        state.builder_name = inputs.name
        state.builder_driver = inputs.driver
        state.save(runtime, "builder_name", "builder_driver")

        certs_dir = self.config.certs_dir
        os.makedirs(certs_dir, exist_ok=True)
        state.certs_dir = certs_dir
        state.save(runtime, "certs_dir")

        credentials = self.credentials or CredentialSource.from_env(runtime.env)
        endpoint = self._temp_docker_context(state) or inputs.endpoint

        if inputs.driver != constants.DRIVER_DOCKER:
            with runtime.group("Creating a new builder instance"):
                cred_opts = set_credentials(certs_dir, 0, inputs.driver, endpoint, credentials)
                create_inputs = inputs.model_copy(
                    update={"driver_opts": [*inputs.driver_opts, *cred_opts], "endpoint": endpoint}
                )
                args = get_create_args(create_inputs, version, BuildkitConfig(self.tmp_dir))
                self.buildx.run(args)
            self._advance(Phase.BUILDER_CREATED)

            nodes = inputs.append_nodes()
            if nodes:
                with runtime.group("Appending node(s) to builder"):
                    for index, node in enumerate(nodes, start=1):
                        cred_opts = set_credentials(certs_dir, index, inputs.driver, node.endpoint or "", credentials)
                        if cred_opts:
                            node = node.model_copy(update={"driver_opts": [*(node.driver_opts or []), *cred_opts]})
                        self.buildx.run(get_append_args(inputs, node, version))
                self._advance(Phase.NODES_APPENDED)

            with runtime.group("Booting builder"):
                self.buildx.run(get_inspect_args(inputs, version))
            self._advance(Phase.BOOTSTRAPPED)

        if inputs.install:
            if self.standalone:
                raise UnsupportedModeError("Cannot set buildx as default builder without the Docker CLI")
            with runtime.group("Setting buildx as default builder"):
                self.buildx.run(["install"])
            self._advance(Phase.DEFAULT_INSTALLED)

        with runtime.group("Inspecting builder"):
            builder = self.buildx.inspect(inputs.name)
        self._advance(Phase.INSPECTED)

        self._report(builder)
        self._advance(Phase.REPORTED)

        first = builder.first_node()
        if builder.driver == constants.DRIVER_DOCKER_CONTAINER and not self.standalone:
            state.container_name = f"{constants.CONTAINER_NAME_PREFIX}{first.name}"
            state.save(runtime, "container_name")
            with runtime.group("BuildKit version"):
                for node in builder.nodes:
                    logger.info(f"{node.name}: {get_buildkit_version(node, self.docker)}")

        if runtime.is_debug() or "--debug" in (first.buildkitd_flags or ""):
            state.debug = True
            state.save(runtime, "debug")

        return builder

    def _print_docker_info(self):
        runtime = self.runtime
        try:
            with runtime.group("Docker info"):
                self.docker.print_version()
                self.docker.print_info()
        except (SetupBuildxError, OSError) as e:
            logger.info(f"[Lifecycle] Cannot print docker info: {e}")

    def _resolve_tool(self):
        """Build, download or keep the available buildx, then install it"""
        inputs = self.config.inputs
        selector = inputs.tool_version()
        tool_dir = None
        if is_valid_ref(selector) or is_short_hash(selector):
            if self.standalone:
                raise UnsupportedModeError("Cannot build from source without the Docker CLI")
            with self.runtime.group("Build buildx from source"):
                tool_dir = self.installer.build(selector, inputs.cache_binary)
        elif selector or not self.buildx.is_available():
            with self.runtime.group("Download buildx from GitHub Releases"):
                tool_dir = self.installer.download(selector or "latest", inputs.cache_binary)

        if tool_dir is None:
            return
        with self.runtime.group("Install buildx"):
            if self.standalone:
                self.installer.install_standalone(tool_dir, self.config.buildx_config_dir)
            else:
                self.installer.install_plugin(tool_dir, self.config.docker_config_home)
        self.buildx.reset_version()

    def _temp_docker_context(self, state: RunState) -> str:
        """
        The docker-container driver cannot use TLS data of the default context
        directly, so a copy of it is created and used as endpoint.
        """
        inputs = self.config.inputs
        if self.standalone or inputs.driver != constants.DRIVER_DOCKER_CONTAINER or inputs.endpoint:
            return ""
        if not Docker.has_tls_material(self.docker.context_tls_material("default")):
            return ""
        name = f"{constants.BUILDER_NAME_PREFIX}{uuid.uuid4()}"
        with self.runtime.group("Creating temp docker context (TLS data loaded in default one)"):
            self.docker.create_context(name, "default")
        state.tmp_docker_context = name
        state.save(self.runtime, "tmp_docker_context")
        return name

    def _report(self, builder: Builder):
        runtime = self.runtime
        first = builder.first_node()
        with runtime.group("Builder info"):
            logger.info(builder.nodes_json())
        runtime.set_output("driver", builder.driver or "")
        runtime.set_output("platforms", ",".join(builder.platforms()))
        runtime.set_output("nodes", builder.nodes_json())
        runtime.set_output("endpoint", first.endpoint or "")
        runtime.set_output("status", first.status or "")
        runtime.set_output("flags", first.buildkitd_flags or "")

    # ----------------------
    #
    #  Teardown phase
    #
    # ----------------------

    def post(self) -> List[Phase]:
        """
        Best-effort cleanup from the persisted state.

        Returns:
            List[Phase]: Teardown steps that completed
        """
        runtime = self.runtime
        state = RunState.load(runtime)
        done: List[Phase] = []

        if state.debug and state.container_name:
            try:
                with runtime.group("BuildKit container logs"):
                    for line in self.docker.container_logs(state.container_name).splitlines():
                        logger.info(line)
            except (SetupBuildxError, OSError) as e:
                logger.warning(f"[Lifecycle] Cannot print BuildKit container logs: {e}")

        if state.cleanup and state.builder_name and state.builder_driver != constants.DRIVER_DOCKER:
            if self._remove_builder(state):
                done.append(Phase.BUILDER_REMOVED)
                self._advance(Phase.BUILDER_REMOVED)

        if state.tmp_docker_context:
            try:
                with runtime.group("Removing temp docker context"):
                    self.docker.remove_context(state.tmp_docker_context)
                done.append(Phase.TEMP_CONTEXT_REMOVED)
                self._advance(Phase.TEMP_CONTEXT_REMOVED)
            except (SetupBuildxError, OSError) as e:
                logger.warning(f"[Lifecycle] Failed to remove temp docker context {state.tmp_docker_context}: {e}")

        if state.certs_dir and os.path.exists(state.certs_dir):
            try:
                with runtime.group("Removing certs directory"):
                    shutil.rmtree(state.certs_dir)
                done.append(Phase.CERTS_DIR_REMOVED)
                self._advance(Phase.CERTS_DIR_REMOVED)
            except OSError as e:
                logger.warning(f"[Lifecycle] Failed to remove certs directory {state.certs_dir}: {e}")

        return done

    def _remove_builder(self, state: RunState) -> bool:
        buildx = Buildx(self.exec, standalone=state.standalone)
        try:
            if not buildx.exists(state.builder_name):
                logger.debug(f"[Lifecycle] Builder {state.builder_name} does not exist anymore")
                return False
            with self.runtime.group("Removing builder"):
                buildx.run(get_rm_args(state.builder_name, state.keep_state))
            return True
        except (SetupBuildxError, OSError) as e:
            logger.warning(f"[Lifecycle] Failed to remove builder {state.builder_name}: {e}")
            return False
