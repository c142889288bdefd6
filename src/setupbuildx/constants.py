# --- Log and Debug ---
# Short aliases for module names to keep CLI/env concise
LOG_ALIAS_MAP = {
    "args": "setupbuildx.buildx.args",
    "inspect": "setupbuildx.buildx.inspect",
    "ins": "setupbuildx.buildx.inspect",
    "install": "setupbuildx.buildx.install",
    "inst": "setupbuildx.buildx.install",
    "ver": "setupbuildx.buildx.version",
    "lc": "setupbuildx.lifecycle",
    "life": "setupbuildx.lifecycle",
    "exec": "setupbuildx.exec",
    "conf": "setupbuildx.config",
    "gh": "setupbuildx.github",
    "cache": "setupbuildx.toolcache",
    "tc": "setupbuildx.toolcache",
}

# Top-level modules within setupbuildx for auto-prefixing
KNOWN_TOP_MODULES = {
    "actions",
    "auth",
    "buildkit",
    "buildx",
    "cli",
    "config",
    "datacls",
    "docker",
    "exec",
    "git",
    "github",
    "lifecycle",
    "rules",
    "state",
    "toolcache",
    "utils",
}

LOG_LEVELS_ENV = "SETUP_BUILDX_LOG_LEVELS"


# --- Drivers ---
DRIVER_DOCKER = "docker"
DRIVER_DOCKER_CONTAINER = "docker-container"
DRIVER_KUBERNETES = "kubernetes"
DRIVER_REMOTE = "remote"
DRIVER_CLOUD = "cloud"

DEFAULT_DRIVER = DRIVER_DOCKER_CONTAINER

# Drivers that accept --buildkitd-flags and --config
FLAG_SUPPORTING_DRIVERS = {"", DRIVER_DOCKER_CONTAINER, DRIVER_DOCKER, DRIVER_KUBERNETES}

# Drivers that never receive explicit --buildkitd-flags
FLAG_SUPPRESSED_DRIVERS = {DRIVER_REMOTE}

DEFAULT_BUILDKITD_FLAGS = (
    "--allow-insecure-entitlement security.insecure "
    "--allow-insecure-entitlement network.host"
)


# --- Version gates ---
# capability name -> range the resolved buildx version must satisfy
CAPABILITY_RULES = {
    "supports_driver_opts": ">=0.3.0",
    "supports_builder_flag": ">=0.4.0",
    "requires_explicit_append_node_name": "<0.11.0",
}


# --- Names and Prefixes ---
BUILDER_NAME_PREFIX = "builder-"
NODE_NAME_PREFIX = "node-"
CONTAINER_NAME_PREFIX = "buildx_buildkit_"
BUILDER_NODE_ENV_PREFIX = "BUILDER_NODE"
TLS_ENV_SUFFIXES = {
    "cacert": "AUTH_TLS_CACERT",
    "cert": "AUTH_TLS_CERT",
    "key": "AUTH_TLS_KEY",
}
CLOUD_VERSION_PREFIXES = ("cloud:", "lab:")


# --- Filenames and Paths ---
TOOL_NAME = "buildx"
PLUGIN_BIN_NAME = "docker-buildx"
STANDALONE_BIN_NAME = "buildx"
CLI_PLUGINS_DIR = "cli-plugins"
CERTS_DIR = "certs"
BUILDKITD_CONFIG_FILENAME = "buildkitd.toml"
BUILD_OUTPUT_DIR = "build-cache"
SOURCE_BUILD_CACHE_NAME = "buildx-dl-bin"


# --- Release sources ---
BUILDX_REPO_URL = "https://github.com/docker/buildx.git"
RELEASES_URL = "https://raw.githubusercontent.com/docker/actions-toolkit/main/.github/buildx-releases.json"
LAB_RELEASES_URL = "https://raw.githubusercontent.com/docker/actions-toolkit/main/.github/buildx-lab-releases.json"
DOWNLOAD_URL = "https://github.com/docker/buildx/releases/download/v{version}/{filename}"
LAB_DOWNLOAD_URL = "https://github.com/docker/buildx-desktop/releases/download/v{version}/{filename}"
GIT_REF_PREFIXES = ("git://", "github.com/", "git@")


# --- Platform name mapping ---
# platform.machine() -> canonical CPU name
MACHINE_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "ppc64le": "ppc64",
    "ppc64": "ppc64",
}

# canonical CPU name -> release asset arch
ARCH_MAP = {
    "x64": "amd64",
    "ppc64": "ppc64le",
}
