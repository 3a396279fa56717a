"""
Constants shared across the prakasa_env package.

Exit codes, configuration keys and defaults, workload locations inside the
secondary OS environment, and the timeouts used by the components live here
so that the CLI, the configuration store and the environment engine agree.
"""

import enum
import os


class CommandResult(enum.IntEnum):
    """Process exit codes returned by every top-level command."""
    SUCCESS = 0
    INVALID_ARGS = 1
    ENVIRONMENT_ERROR = 2
    EXECUTION_ERROR = 3
    INTERRUPTED = 130


# Configuration keys
KEY_PROXY_URL = "proxy_url"
KEY_WSL_LINUX_DISTRO = "wsl_linux_distro"
KEY_WSL_INSTALLER_URL = "wsl_installer_url"
KEY_WSL_KERNEL_URL = "wsl_kernel_url"
KEY_PRAKASA_GIT_REPO_URL = "prakasa_git_repo_url"

DEFAULT_WSL_LINUX_DISTRO = "Ubuntu-24.04"

# proxy_url has no default
BUILTIN_CONFIG_DEFAULTS = {
    KEY_WSL_LINUX_DISTRO: DEFAULT_WSL_LINUX_DISTRO,
    KEY_WSL_INSTALLER_URL: "https://github.com/microsoft/WSL/releases/download/2.4.13/wsl.2.4.13.0.x64.msi",
    KEY_WSL_KERNEL_URL: "https://wslstorestorage.blob.core.windows.net/wslblob/wsl_update_x64.msi",
    KEY_PRAKASA_GIT_REPO_URL: "https://github.com/hetu-project/prakasa.git",
}

VALID_CONFIG_KEYS = (
    KEY_PROXY_URL,
    KEY_WSL_LINUX_DISTRO,
    KEY_WSL_INSTALLER_URL,
    KEY_WSL_KERNEL_URL,
    KEY_PRAKASA_GIT_REPO_URL,
)

CONFIG_ENV_VAR = "PRAKASA_ENV_CONFIG"
DEFAULT_CONFIG_PATH = os.environ.get(
    CONFIG_ENV_VAR,
    os.path.join(os.path.expanduser("~"), ".prakasa_env", "config.yaml"),
)

# Workload layout inside the secondary OS environment
PROJECT_DIR = "~/prakasa"
PROJECT_PACKAGE = "prakasa"
PROJECT_EXTRAS = ".[gpu]"
PROJECT_DEFAULT_BRANCH = "main"
CUDA_BIN_DIR = "/usr/local/cuda-12.8/bin"
SUPPORTED_CUDA_VERSIONS = ("12.8", "12.9")

# Timeouts in seconds
DEFAULT_COMMAND_TIMEOUT = 30
GIT_FETCH_TIMEOUT = 60
GIT_PULL_TIMEOUT = 300
GIT_CLONE_TIMEOUT = 600
APT_TIMEOUT = 300
PIP_TIMEOUT = 300
PROJECT_INSTALL_TIMEOUT = 1800
FEATURE_ENABLE_TIMEOUT = 600
WSL_UPDATE_TIMEOUT = 600
WSL_DISTRO_INSTALL_TIMEOUT = 1800

# Windows build numbers that first support WSL2
WINDOWS10_MIN_BUILD = 19041
WINDOWS10_MIN_BUILD_X64 = 18362

# dism.exe and msiexec use this exit code for "success, reboot required"
REBOOT_REQUIRED_EXIT_CODE = 3010

CHAT_UI_URL = "http://localhost:3002"
