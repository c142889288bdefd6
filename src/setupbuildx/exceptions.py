from typing import List, Optional


class SetupBuildxError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors related to loading and validating the inputs ---
class ConfigurationError(SetupBuildxError):
    """Base class for errors encountered while reading or validating inputs."""

    pass


class ConfigFileMissingError(ConfigurationError):
    """Raised when an inputs file passed on the command line cannot be found."""

    pass


class ConfigParsingError(ConfigurationError):
    """Raised when an inputs file or the `append` input is not valid YAML."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when the inputs fail structural validation (e.g., Pydantic)."""

    pass


# --- 2. Errors related to the textual output of the external tool ---
class ParseError(SetupBuildxError):
    """Raised when a version banner or an inspect dump has an unknown shape."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


# --- 3. Errors that occur while acquiring the buildx binary ---
class InstallError(SetupBuildxError):
    """Base class for errors that occur while downloading, building or installing buildx."""

    pass


class ReleaseNotFoundError(InstallError):
    """Raised when the requested tag is absent from the release metadata."""

    def __init__(self, tag: str, source: str):
        super().__init__(f"Cannot find buildx release {tag} in {source}")
        self.tag = tag
        self.source = source


class InvalidVersionError(InstallError):
    """Raised when a resolved release version is not a valid semantic version."""

    pass


class DownloadError(InstallError):
    """Raised when release metadata or a release asset cannot be fetched."""

    pass


# --- 4. Errors related to referenced files ---
class NotFoundError(SetupBuildxError):
    """Raised when a referenced file, like a buildkitd config, does not exist."""

    pass


# --- 5. Errors raised by external processes ---
class ExternalCommandError(SetupBuildxError):
    """Raised when an invoked process exits non-zero with stderr content."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.exit_code = exit_code
        self.stderr = stderr


# --- 6. Unsupported combinations ---
class UnsupportedModeError(SetupBuildxError):
    """Raised when an operation is requested that the current mode cannot perform."""

    pass
