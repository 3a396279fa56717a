"""
Component interface and shared helpers.

EnvironmentComponent is the capability interface the orchestrator depends
on: a kind tag, declared requirements, ``check()`` and ``install()``.
BaseComponent adds the helpers concrete components share (result factories,
command execution, ordered install steps). ProbeOnlyComponent is the base
for prerequisites that can be verified but not installed.
"""

import abc
import logging
from typing import List, NamedTuple, Optional

from prakasa_env.config import DEFAULT_COMMAND_TIMEOUT
from prakasa_env.error_messages import format_error
from prakasa_env.environment.models import (
    ComponentKind,
    ComponentResult,
    EnvironmentRequirements,
    ExecutionContext,
    FailureCode,
    InstallationStatus,
)
from prakasa_env.execution import (
    CommandExecutor,
    CommandLike,
    CommandOutcome,
    ExecutionTarget,
)


class InstallStep(NamedTuple):
    """One remediation command in an ordered install sequence."""
    name: str
    command: CommandLike
    timeout: Optional[float]
    streamed: bool = False
    target: ExecutionTarget = ExecutionTarget.SECONDARY_OS


class EnvironmentComponent(abc.ABC):
    """Interface implemented by every prerequisite."""

    kind: ComponentKind
    requirements: EnvironmentRequirements = EnvironmentRequirements()

    @property
    def name(self) -> str:
        return self.kind.display_name

    @abc.abstractmethod
    def check(self) -> ComponentResult:
        """Read-only probe. Must not change system state."""

    @abc.abstractmethod
    def install(self) -> ComponentResult:
        """Idempotent remediation, Skipped when already satisfied."""


def apt_proxy_args(proxy_url: str) -> List[str]:
    """apt '-o' options routing both schemes through ``proxy_url``."""
    if not proxy_url:
        return []
    return ["-o", f"Acquire::http::proxy={proxy_url}", "-o", f"Acquire::https::proxy={proxy_url}"]


class BaseComponent(EnvironmentComponent):
    """
    Shared implementation for concrete components.

    Subclasses implement ``check()`` and ``_install()``. ``install()``
    remembers a satisfied install so that calling it again in the same
    run reports Skipped without issuing any command.
    """

    failure_code: int = FailureCode.EXECUTION_ERROR

    def __init__(self, context: ExecutionContext, executor: CommandExecutor, logger: logging.Logger):
        self.context = context
        self.executor = executor
        self.logger = logger
        self._installed = False

    def install(self) -> ComponentResult:
        if self._installed:
            result = self._skipped(f"{self.name} is already installed")
            self._log_result("Installing", result)
            return result

        self._log_start("Installing")
        result = self._install()
        if result.is_satisfied and not result.reboot_required:
            self._installed = True
        self._log_result("Installing", result)
        return result

    @abc.abstractmethod
    def _install(self) -> ComponentResult:
        """Perform the remediation. Called by ``install()``."""

    @property
    def proxy_url(self) -> str:
        """The run's proxy when this component declares ``sync_proxy``, else empty."""
        return self.context.proxy_url if self.requirements.sync_proxy else ""

    # Result factories bound to this component's kind
    def _success(self, message: str, reboot_required: bool = False) -> ComponentResult:
        return ComponentResult.success(self.kind, message, reboot_required=reboot_required)

    def _skipped(self, message: str) -> ComponentResult:
        return ComponentResult.skipped(self.kind, message)

    def _warning(self, message: str) -> ComponentResult:
        return ComponentResult.warning(self.kind, message)

    def _failed(self, message: str, error_code: Optional[int] = None) -> ComponentResult:
        return ComponentResult.failed(self.kind, message,
                                      self.failure_code if error_code is None else error_code)

    # Command helpers
    def _run(self, command: CommandLike, timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT,
             target: ExecutionTarget = ExecutionTarget.LOCAL, streamed: bool = False) -> CommandOutcome:
        return self.executor.run(command, timeout=timeout, target=target, streamed=streamed)

    def _run_secondary(self, command: CommandLike, timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT,
                       streamed: bool = False) -> CommandOutcome:
        return self._run(command, timeout=timeout, target=ExecutionTarget.SECONDARY_OS, streamed=streamed)

    @staticmethod
    def _describe_failure(outcome: CommandOutcome, command: CommandLike, timeout: Optional[float]) -> str:
        if outcome.timed_out:
            return format_error('COMMAND_TIMEOUT', command=command, timeout=timeout)
        return outcome.output

    def _execute_steps(self, steps: List[InstallStep], operation: str) -> Optional[ComponentResult]:
        """
        Run install steps in order, stopping at the first non-zero exit.

        Nothing is rolled back; a later install picks up from whatever
        state the completed steps left behind.

        Returns:
            None when every step succeeded, otherwise a Failed result naming
            the step and its command, followed by the captured output.
        """
        for step in steps:
            self.logger.status(f"{operation} step: {step.name}")
            outcome = self._run(step.command, timeout=step.timeout, target=step.target,
                                streamed=step.streamed)
            if outcome.succeeded:
                continue

            message = format_error('STEP_FAILED', step=step.name, command=step.command)
            details = self._describe_failure(outcome, step.command, step.timeout)
            if details:
                message = f"{message}\n{details}"
            elif not outcome.timed_out:
                message = f"{message} (exit code {outcome.exit_code})"
            return self._failed(message)
        return None

    def _log_start(self, operation: str) -> None:
        self.logger.verbose(f"{operation} {self.name}...")

    def _log_result(self, operation: str, result: ComponentResult) -> None:
        if result.status is InstallationStatus.FAILED:
            self.logger.debug(f"{operation} {self.name} failed: {result.message}")
        else:
            self.logger.verbose(f"{operation} {self.name}: {result.status.value} - {result.message}")


class ProbeOnlyComponent(BaseComponent):
    """A prerequisite the engine can verify but cannot install."""

    def _install(self) -> ComponentResult:
        result = self.check()
        if result.is_satisfied:
            return self._skipped(result.message)
        if result.status is InstallationStatus.FAILED:
            return self._failed(format_error('MANUAL_ACTION', message=result.message.rstrip('.')),
                                result.error_code)
        return result
