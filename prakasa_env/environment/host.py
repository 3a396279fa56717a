"""
Probes of the host that seed the ExecutionContext.

Public exports:
    is_admin: Whether the current process holds administrator privileges
    resolve_proxy_url: Proxy from the configuration store or the environment
    check_secondary_os_available: Whether the WSL distribution is installed
    build_execution_context: Construct the per-run ExecutionContext
"""

import ctypes
import logging
import os
from typing import Optional

from prakasa_env.config import (
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_WSL_LINUX_DISTRO,
    KEY_PROXY_URL,
    KEY_WSL_LINUX_DISTRO,
)
from prakasa_env.config_store import ConfigStore
from prakasa_env.environment.models import ExecutionContext
from prakasa_env.execution import Command, CommandExecutor, ExecutionTarget

PROXY_ENV_VARS = ("HTTPS_PROXY", "https_proxy", "HTTP_PROXY", "http_proxy", "ALL_PROXY", "all_proxy")


def is_admin() -> bool:
    """Return True when running elevated (Windows) or as root (POSIX)."""
    if os.name == 'nt':
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    return hasattr(os, 'geteuid') and os.geteuid() == 0


def resolve_proxy_url(config: Optional[ConfigStore]) -> str:
    """The configured proxy_url, else the first proxy environment variable that is set."""
    if config is not None:
        configured = config.get_value(KEY_PROXY_URL).strip()
        if configured:
            return configured
    for name in PROXY_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


def list_secondary_os_distros(executor: CommandExecutor) -> Optional[list]:
    """Names printed by ``wsl --list --quiet``, or None when wsl cannot list distributions."""
    outcome = executor.run(Command.of("wsl", "--list", "--quiet"),
                           timeout=DEFAULT_COMMAND_TIMEOUT, target=ExecutionTarget.LOCAL)
    if not outcome.succeeded:
        return None
    return [line.strip() for line in outcome.stdout.splitlines() if line.strip()]


def check_secondary_os_available(executor: CommandExecutor, distro: str) -> bool:
    distros = list_secondary_os_distros(executor)
    return distros is not None and distro in distros


def build_execution_context(config: ConfigStore,
                            executor: CommandExecutor,
                            logger: logging.Logger,
                            probe_secondary_os: bool = True) -> ExecutionContext:
    """
    Construct the ExecutionContext for one run.

    Args:
        config: Loaded configuration store.
        executor: Executor whose distro is aligned with the configured one.
        logger: Logger for the resolved settings.
        probe_secondary_os: If False, the availability flag is left False
            without running ``wsl``.

    Returns:
        ExecutionContext referencing ``config``.
    """
    distro = config.get_value(KEY_WSL_LINUX_DISTRO) or DEFAULT_WSL_LINUX_DISTRO
    executor.distro = distro

    context = ExecutionContext(
        distro=distro,
        proxy_url=resolve_proxy_url(config),
        is_admin=is_admin(),
        config=config,
    )
    if probe_secondary_os:
        context.secondary_os_available = check_secondary_os_available(executor, distro)

    logger.verbose(
        f"Execution context: distro={context.distro}, admin={context.is_admin}, "
        f"secondary_os_available={context.secondary_os_available}, "
        f"proxy={'set' if context.proxy_url else 'unset'}"
    )
    return context
