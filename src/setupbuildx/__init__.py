"""
setup-buildx

Provisions a buildx builder for CI pipelines: installs buildx, creates the
builder (with optional appended nodes and TLS credentials), bootstraps it
and reports its metadata as step outputs. A separate teardown phase removes
what the main phase created.

Main modules:
- actions: runner protocol (inputs, outputs, state, groups)
- config: inputs loading and validation
- buildx: version/inspect parsing, argument synthesis, install
- auth: TLS credential materialization
- lifecycle: main and teardown phases
- datacls: Builder, Node and release models

Quick start example:
```python
from setupbuildx import Config, Lifecycle

config = Config(config_path="inputs.yml")
builder = Lifecycle(config).run()
```
"""

__version__ = "0.1.0"

from .config import Config, InputsModel
from .lifecycle import Lifecycle, Phase
from .datacls import Builder, Node, GitHubRelease
from .exceptions import (
    SetupBuildxError,
    ConfigurationError,
    ParseError,
    InstallError,
    ReleaseNotFoundError,
    InvalidVersionError,
    NotFoundError,
    ExternalCommandError,
    UnsupportedModeError,
)

__all__ = [
    # Version
    '__version__',
    # Config
    'Config',
    'InputsModel',
    # Lifecycle
    'Lifecycle',
    'Phase',
    # Models
    'Builder',
    'Node',
    'GitHubRelease',
    # Exceptions
    'SetupBuildxError',
    'ConfigurationError',
    'ParseError',
    'InstallError',
    'ReleaseNotFoundError',
    'InvalidVersionError',
    'NotFoundError',
    'ExternalCommandError',
    'UnsupportedModeError',
]
