"""
WSL2 runtime and Linux distribution.

Installing WSL2 has two phases. Enabling the Windows features usually needs
a restart; when it does, the install stops there and reports a reboot. After
the restart the next install updates the WSL kernel and installs the
distribution.
"""

from prakasa_env.config import (
    DEFAULT_COMMAND_TIMEOUT,
    FEATURE_ENABLE_TIMEOUT,
    KEY_WSL_INSTALLER_URL,
    KEY_WSL_KERNEL_URL,
    REBOOT_REQUIRED_EXIT_CODE,
    WSL_DISTRO_INSTALL_TIMEOUT,
    WSL_UPDATE_TIMEOUT,
)
from prakasa_env.environment.components.base import BaseComponent, InstallStep
from prakasa_env.environment.host import list_secondary_os_distros
from prakasa_env.environment.models import (
    ComponentKind,
    ComponentResult,
    EnvironmentRequirements,
    FailureCode,
)
from prakasa_env.execution import Command, ExecutionTarget, quote_powershell

WINDOWS_FEATURES = ("Microsoft-Windows-Subsystem-Linux", "VirtualMachinePlatform")


def enable_feature_command(feature: str) -> Command:
    return Command.of("dism.exe", "/online", "/enable-feature", f"/featurename:{feature}", "/all", "/norestart")


class WSLRuntimeComponent(BaseComponent):
    """WSL2 itself plus the configured Linux distribution."""

    kind = ComponentKind.SECONDARY_OS_RUNTIME
    failure_code = FailureCode.SECONDARY_OS_MISSING
    requirements = EnvironmentRequirements(need_admin=True, sync_proxy=True)

    def check(self) -> ComponentResult:
        self._log_start("Checking")
        result = self._probe()
        self._log_result("Checking", result)
        return result

    def _probe(self) -> ComponentResult:
        status = self._run(Command.of("wsl", "--status"))
        if not status.succeeded:
            self.context.secondary_os_available = False
            return self._failed("WSL2 is not installed or not enabled")

        distros = list_secondary_os_distros(self.executor) or []
        self.logger.debug(f"Installed WSL distributions: {distros}")
        self.context.secondary_os_available = self.context.distro in distros
        if not self.context.secondary_os_available:
            return self._failed(f"WSL distribution {self.context.distro} is not installed",
                                FailureCode.SECONDARY_OS_UNAVAILABLE)
        return self._success(f"WSL2 with {self.context.distro} is installed")

    def _install(self) -> ComponentResult:
        current = self._probe()
        if current.is_satisfied:
            return self._skipped(current.message)

        if current.error_code == FailureCode.SECONDARY_OS_MISSING:
            failure, reboot_required = self._enable_features()
            if failure is not None:
                return failure
            if reboot_required:
                return self._success("WSL2 features enabled, restart to finish the installation",
                                     reboot_required=True)

        failure = self._execute_steps([
            InstallStep("set_default_version", Command.of("wsl", "--set-default-version", "2"),
                        DEFAULT_COMMAND_TIMEOUT, target=ExecutionTarget.LOCAL),
        ], "WSL2")
        if failure is not None:
            return failure

        failure, reboot_required = self._update_runtime()
        if failure is not None:
            return failure
        if reboot_required:
            return self._success("WSL2 kernel updated, restart to finish the installation",
                                 reboot_required=True)

        failure = self._execute_steps([
            InstallStep("install_distro",
                        Command.of("wsl", "--install", "-d", self.context.distro, "--no-launch"),
                        WSL_DISTRO_INSTALL_TIMEOUT, streamed=True, target=ExecutionTarget.LOCAL),
        ], "WSL2")
        if failure is not None:
            return failure

        verified = self._probe()
        if not verified.is_satisfied:
            return self._failed(f"WSL2 installation completed but verification failed: {verified.message}",
                                verified.error_code)
        return self._success(f"WSL2 with {self.context.distro} installed successfully")

    def _enable_features(self):
        """Enable the Windows features WSL2 needs. Returns (failure, reboot_required)."""
        reboot_required = False
        for feature in WINDOWS_FEATURES:
            command = enable_feature_command(feature)
            self.logger.status(f"Enabling Windows feature {feature}")
            outcome = self._run(command, timeout=FEATURE_ENABLE_TIMEOUT, target=ExecutionTarget.ELEVATED)
            if outcome.exit_code == REBOOT_REQUIRED_EXIT_CODE:
                reboot_required = True
            elif not outcome.succeeded:
                details = self._describe_failure(outcome, command, FEATURE_ENABLE_TIMEOUT)
                return self._failed(f"Failed to enable Windows feature {feature}: {details}"), False
        return None, reboot_required

    def _update_runtime(self):
        """
        Bring WSL itself up to date. Returns (failure, reboot_required).

        ``wsl --update`` is tried first. Without store access the WSL package
        is installed from the configured MSI, then the standalone kernel MSI.
        """
        outcome = self._run(Command.of("wsl", "--update"), timeout=WSL_UPDATE_TIMEOUT, streamed=True)
        if outcome.succeeded:
            return None, False

        self.logger.warning("'wsl --update' failed, installing WSL from the MSI package")
        for key in (KEY_WSL_INSTALLER_URL, KEY_WSL_KERNEL_URL):
            url = self.context.config.get_value(key) if self.context.config is not None else ""
            if not url:
                continue
            exit_code = self._install_msi(url)
            if exit_code == 0:
                return None, False
            if exit_code == REBOOT_REQUIRED_EXIT_CODE:
                return None, True
        return self._failed("Failed to update WSL2. Install the WSL package manually and retry."), False

    def _install_msi(self, url: str) -> int:
        """Download an MSI to %TEMP% and install it quietly. Returns the script's exit code."""
        filename = url.rsplit("/", 1)[-1] or "wsl_update.msi"
        proxy = f" -Proxy {quote_powershell(self.proxy_url)}" if self.proxy_url else ""
        script = (
            "$ErrorActionPreference = 'Stop'; "
            f"$msi = Join-Path $env:TEMP {quote_powershell(filename)}; "
            f"Invoke-WebRequest -Uri {quote_powershell(url)} -OutFile $msi -UseBasicParsing{proxy}; "
            "$p = Start-Process msiexec.exe -ArgumentList '/i', $msi, '/quiet', '/norestart' -Wait -PassThru; "
            "exit $p.ExitCode"
        )
        self.logger.status(f"Installing {filename}")
        outcome = self._run(script, timeout=WSL_UPDATE_TIMEOUT, target=ExecutionTarget.ELEVATED)
        if not outcome.succeeded:
            self.logger.debug(f"Installing {url} exited with {outcome.exit_code}: {outcome.output}")
        return outcome.exit_code
