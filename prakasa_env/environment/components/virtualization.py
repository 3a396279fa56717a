"""BIOS virtualization prerequisite."""

from prakasa_env.environment.components.base import ProbeOnlyComponent
from prakasa_env.environment.models import ComponentKind, ComponentResult, FailureCode
from prakasa_env.execution import Command, ExecutionTarget

FIRMWARE_ENABLED = "Virtualization Enabled In Firmware: Yes"
FIRMWARE_DISABLED = "Virtualization Enabled In Firmware: No"

# Phrases 'wsl --status' prints when the hypervisor cannot start
WSL_VIRTUALIZATION_ERRORS = (
    "ensure virtualization is enabled in the bios",
    "wsl2 is not supported with your current machine configuration",
    "virtualization is not enabled",
)

DISABLED_MESSAGE = (
    "BIOS virtualization is not enabled. "
    "Please restart your computer and enable virtualization in BIOS settings."
)


class BIOSVirtualizationComponent(ProbeOnlyComponent):
    kind = ComponentKind.BIOS_VIRTUALIZATION
    failure_code = FailureCode.VIRTUALIZATION_DISABLED

    def check(self) -> ComponentResult:
        self._log_start("Checking")
        result = self._check_systeminfo()
        if result is None:
            result = self._check_wsl_status()
        if result is None:
            result = self._success("BIOS virtualization status check completed (unable to verify definitively)")
        self._log_result("Checking", result)
        return result

    def _check_systeminfo(self):
        outcome = self._run(Command.of("systeminfo"), target=ExecutionTarget.ELEVATED)
        if not outcome.succeeded:
            return None
        if FIRMWARE_ENABLED in outcome.stdout:
            return self._success("BIOS virtualization is enabled")
        if FIRMWARE_DISABLED in outcome.stdout:
            return self._failed(DISABLED_MESSAGE)
        # A running hypervisor hides the firmware lines
        return None

    def _check_wsl_status(self):
        outcome = self._run(Command.of("wsl", "--status"), target=ExecutionTarget.ELEVATED)
        # wsl exits non-zero when the hypervisor cannot start, so the text is checked first
        text = outcome.output.lower()
        if any(phrase in text for phrase in WSL_VIRTUALIZATION_ERRORS):
            return self._failed(DISABLED_MESSAGE)
        if not outcome.succeeded:
            return None
        return self._success("BIOS virtualization is enabled (verified through WSL2)")
