"""
Verdict derivation for orchestrator runs.

The verdict is a pure fold over component results: a reboot request wins over
everything, then any failure, then any warning, otherwise success. The fold
only asks "is there any X", so it does not depend on result order.
"""

import enum
from typing import Iterable

from prakasa_env.config import CommandResult
from prakasa_env.environment.models import ComponentResult, InstallationStatus


class Verdict(enum.Enum):
    SUCCESS = "success"
    WARNING = "warning"
    FAILED = "failed"
    REBOOT_REQUIRED = "reboot_required"


class RunMode(enum.Enum):
    CHECK = "check"
    INSTALL = "install"


OVERALL_MESSAGES = {
    Verdict.SUCCESS: "All environment components are ready",
    Verdict.WARNING: "Environment is ready, some components have warnings",
    Verdict.FAILED: "Some environment components failed",
    Verdict.REBOOT_REQUIRED: "A system reboot is required to finish the installation",
}


def derive_verdict(results: Iterable[ComponentResult], reboot_required: bool = False) -> Verdict:
    """
    Fold component results into a single verdict.

    Args:
        results: Component results of one run, in any order.
        reboot_required: Run-level reboot flag, OR-ed with the per-result flags.

    Returns:
        REBOOT_REQUIRED, FAILED, WARNING or SUCCESS, in that priority.
    """
    results = list(results)
    if reboot_required or any(r.reboot_required for r in results):
        return Verdict.REBOOT_REQUIRED
    if any(r.status is InstallationStatus.FAILED for r in results):
        return Verdict.FAILED
    if any(r.status is InstallationStatus.WARNING for r in results):
        return Verdict.WARNING
    return Verdict.SUCCESS


def overall_message(verdict: Verdict) -> str:
    return OVERALL_MESSAGES[verdict]


def verdict_to_command_result(verdict: Verdict, mode: RunMode) -> CommandResult:
    """
    Map a verdict to the exit code of the check or install command.

    A check that needs a reboot is an environment error. An install that
    needs a reboot did its job and succeeds; the user is told to restart.
    """
    if mode is RunMode.CHECK:
        if verdict in (Verdict.SUCCESS, Verdict.WARNING):
            return CommandResult.SUCCESS
        return CommandResult.ENVIRONMENT_ERROR

    if verdict is Verdict.FAILED:
        return CommandResult.EXECUTION_ERROR
    return CommandResult.SUCCESS
