"""
Credential materializer

Writes per-node TLS client material next to the builder so that `remote`
nodes can reference it through `cacert=`, `cert=` and `key=` driver options.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from . import constants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TLSMaterial:
    """PEM contents for one node, empty strings when not supplied"""

    cacert: str = ""
    cert: str = ""
    key: str = ""

    def is_empty(self) -> bool:
        return not (self.cacert or self.cert or self.key)

    def items(self):
        # order of the emitted driver options
        return (("cacert", self.cacert), ("cert", self.cert), ("key", self.key))


class CredentialSource:
    """
    Node index -> TLS material. Index 0 is the primary node, 1+ the appended
    nodes in input order.
    """

    def __init__(self, materials: Optional[Dict[int, TLSMaterial]] = None):
        self.materials = dict(materials or {})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CredentialSource":
        """
        Collect `BUILDER_NODE_<i>_AUTH_TLS_{CACERT,CERT,KEY}` variables
        """
        environ = os.environ if environ is None else environ
        materials: Dict[int, Dict[str, str]] = {}
        prefix = f"{constants.BUILDER_NODE_ENV_PREFIX}_"
        for name, value in environ.items():
            if not name.startswith(prefix):
                continue
            index, _, suffix = name[len(prefix):].partition("_")
            if not index.isdigit():
                continue
            for kind, env_suffix in constants.TLS_ENV_SUFFIXES.items():
                if suffix == env_suffix:
                    materials.setdefault(int(index), {})[kind] = value
        return cls({index: TLSMaterial(**kinds) for index, kinds in materials.items()})

    def get(self, index: int) -> TLSMaterial:
        return self.materials.get(index, TLSMaterial())


def set_credentials(
    creds_dir: str,
    index: int,
    driver: str,
    endpoint: str,
    source: CredentialSource,
) -> List[str]:
    """
    Materialize TLS files for a `tcp://` endpoint.

    Args:
        creds_dir: Directory receiving `<kind>_<host>[-<port>].pem` files
        index: Node index in the credential source
        driver: Builder driver, only `remote` receives the options
        endpoint: Node endpoint; context names and other schemes are ignored

    Returns:
        List[str]: `kind=path` driver options, empty unless the driver is `remote`
    """
    if not endpoint:
        return []
    try:
        url = urlparse(endpoint)
        port = url.port
    except ValueError:
        return []
    if not url.scheme:
        return []
    if url.scheme != "tcp":
        return []

    material = source.get(index)
    if material.is_empty():
        return []

    host = url.hostname or ""
    if port is not None:
        host = f"{host}-{port}"

    os.makedirs(creds_dir, exist_ok=True)
    driver_opts = []
    for kind, content in material.items():
        if not content:
            continue
        path = os.path.join(creds_dir, f"{kind}_{host}.pem")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug(f"[Auth] Wrote {kind} for node {index} to {path}")
        driver_opts.append(f"{kind}={path}")

    if driver != constants.DRIVER_REMOTE:
        return []
    return driver_opts
