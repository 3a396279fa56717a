"""pip inside the WSL distribution."""

from prakasa_env.config import APT_TIMEOUT, DEFAULT_COMMAND_TIMEOUT, PIP_TIMEOUT
from prakasa_env.environment.components.base import BaseComponent, InstallStep, apt_proxy_args
from prakasa_env.environment.models import (
    ComponentKind,
    ComponentResult,
    EnvironmentRequirements,
    FailureCode,
)
from prakasa_env.execution import Command

PIP_VERSION = Command.of("pip", "--version")


class PipComponent(BaseComponent):
    kind = ComponentKind.PIP_UPGRADE
    failure_code = FailureCode.PIP_MISSING
    requirements = EnvironmentRequirements(need_secondary_os=True, sync_proxy=True)

    def check(self) -> ComponentResult:
        self._log_start("Checking")
        outcome = self._run_secondary(PIP_VERSION)
        if outcome.succeeded:
            result = self._skipped(f"pip is installed: {outcome.stdout.strip()}")
        else:
            result = self._failed("pip is not installed")
        self._log_result("Checking", result)
        return result

    def install_steps(self):
        proxy = self.proxy_url
        pip_proxy = ["--proxy", proxy] if proxy else []
        return [
            InstallStep(
                "install_python3_pip",
                Command.of("apt-get", *apt_proxy_args(proxy), "install", "-y", "python3-pip",
                           env={"DEBIAN_FRONTEND": "noninteractive"}),
                APT_TIMEOUT,
            ),
            InstallStep(
                "upgrade_pip",
                Command.of("pip", "install", *pip_proxy, "--upgrade", "pip",
                           "--break-system-packages", "--ignore-installed"),
                PIP_TIMEOUT,
            ),
        ]

    def _install(self) -> ComponentResult:
        current = self.check()
        if current.is_satisfied:
            return self._skipped(current.message)

        failure = self._execute_steps(self.install_steps(), "pip")
        if failure is not None:
            return failure

        outcome = self._run_secondary(PIP_VERSION, timeout=DEFAULT_COMMAND_TIMEOUT)
        if not outcome.succeeded:
            return self._failed("pip installation completed but verification failed")
        return self._success("pip installed and upgraded successfully")
