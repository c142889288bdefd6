"""
Container engine collaborator

Plain CLI calls go through `Exec` so they show up in the step log; container
logs, exec and contexts use python-on-whales.
"""

import logging
import shutil
from typing import Any, Dict, List, Optional

from python_on_whales import DockerClient
from python_on_whales.exceptions import DockerException

from .exceptions import ExternalCommandError
from .exec import Exec, check

logger = logging.getLogger(__name__)


class Docker:
    """Thin facade over the docker CLI"""

    def __init__(self, exec_: Optional[Exec] = None, client: Optional[DockerClient] = None):
        self.exec = exec_ or Exec()
        self._client = client

    @property
    def client(self) -> DockerClient:
        if self._client is None:
            self._client = DockerClient()
        return self._client

    @staticmethod
    def is_available() -> bool:
        return shutil.which("docker") is not None

    def _run(self, args: List[str], silent: bool = True):
        output = self.exec.get_exec_output("docker", args, silent=silent, ignore_return_code=True)
        return check(output, ["docker", *args])

    def print_version(self):
        self._run(["version"], silent=False)

    def print_info(self):
        self._run(["info"], silent=False)

    def context(self) -> str:
        """Name of the current docker context"""
        try:
            return self.client.context.inspect().name
        except DockerException as e:
            raise ExternalCommandError(f"Cannot inspect current docker context: {e}") from e

    def context_tls_material(self, name: str = "default") -> Dict[str, Any]:
        """TLS files stored with context `name`, keyed by endpoint"""
        try:
            return self.client.context.inspect(name).tls_material or {}
        except DockerException as e:
            raise ExternalCommandError(f"Cannot inspect docker context {name}: {e}") from e

    @staticmethod
    def has_tls_material(tls_material: Dict[str, Any]) -> bool:
        return any(bool(files) for files in tls_material.values())

    def create_context(self, name: str, source: str = "default"):
        logger.info(f"[Docker] Creating context {name} from {source}")
        try:
            self.client.context.create(name, from_=source)
        except DockerException as e:
            raise ExternalCommandError(f"Cannot create docker context {name}: {e}") from e

    def remove_context(self, name: str):
        try:
            self.client.context.remove(name, force=True)
        except DockerException as e:
            raise ExternalCommandError(f"Cannot remove docker context {name}: {e}") from e

    def container_logs(self, container: str) -> str:
        try:
            return self.client.container.logs(container)
        except DockerException as e:
            raise ExternalCommandError(f"Cannot read logs of {container}: {e}") from e

    def container_exec(self, container: str, command: List[str]) -> str:
        try:
            return self.client.container.execute(container, command)
        except DockerException as e:
            raise ExternalCommandError(f"Cannot exec into {container}: {e}") from e
