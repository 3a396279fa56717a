"""
Environment orchestrator.

Runs every component's ``check()`` or ``install()`` in a fixed order and
folds the results into one EnvironmentResult. A run never aborts early:
a failing or raising component is recorded and the next one still runs,
so the caller always sees the full picture.
"""

import enum
import logging
from typing import Callable, List, Optional, Sequence

from prakasa_env.error_messages import format_error
from prakasa_env.environment.components import DEFAULT_COMPONENT_CLASSES, EnvironmentComponent
from prakasa_env.environment.models import (
    ComponentResult,
    EnvironmentResult,
    ExecutionContext,
    FailureCode,
)
from prakasa_env.environment.verdict import RunMode, Verdict, derive_verdict, overall_message
from prakasa_env.execution import CommandExecutor

ProgressCallback = Callable[[ComponentResult], None]


class OrchestratorState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


def build_default_components(context: ExecutionContext,
                             executor: CommandExecutor,
                             logger: logging.Logger) -> List[EnvironmentComponent]:
    """One instance of every prerequisite, in orchestration order."""
    return [component_class(context, executor, logger) for component_class in DEFAULT_COMPONENT_CLASSES]


class EnvironmentOrchestrator:
    """
    Sequences check and install runs over an ordered list of components.

    Components share ``context`` and run strictly one after another; later
    components rely on what earlier ones installed.

    Attributes:
        state: IDLE before the first run, RUNNING while components execute
            and DONE once a run produced its EnvironmentResult.
        current_component: The component being executed, None outside a run.
        verdict: Verdict of the last completed run.
    """

    def __init__(self,
                 context: ExecutionContext,
                 executor: CommandExecutor,
                 logger: logging.Logger,
                 components: Optional[Sequence[EnvironmentComponent]] = None):
        self.context = context
        self.executor = executor
        self.logger = logger
        if components is None:
            components = build_default_components(context, executor, logger)
        self.components = list(components)

        self.state = OrchestratorState.IDLE
        self.current_component: Optional[EnvironmentComponent] = None
        self.verdict: Optional[Verdict] = None

    def check_environment(self, callback: Optional[ProgressCallback] = None) -> EnvironmentResult:
        """Probe every component without changing the system."""
        return self._run(RunMode.CHECK, callback)

    def install_environment(self, callback: Optional[ProgressCallback] = None) -> EnvironmentResult:
        """
        Install every component that is not yet satisfied.

        A component that needs a reboot does not stop the run; the
        remaining components are still attempted and the result carries
        ``reboot_required``.
        """
        return self._run(RunMode.INSTALL, callback)

    def _run(self, mode: RunMode, callback: Optional[ProgressCallback]) -> EnvironmentResult:
        self.state = OrchestratorState.RUNNING
        self.logger.verbose(f"Starting environment {mode.value} over {len(self.components)} components")

        result = EnvironmentResult()
        try:
            for component in self.components:
                self.current_component = component
                component_result = self._run_component(component, mode)
                if callback is not None:
                    callback(component_result)
                result.append(component_result)
        finally:
            self.current_component = None

        self.verdict = derive_verdict(result.component_results, result.reboot_required)
        result.overall_message = overall_message(self.verdict)
        self.state = OrchestratorState.DONE
        self.logger.status(f"Environment {mode.value} finished: {result.overall_message}")
        return result

    def _run_component(self, component: EnvironmentComponent, mode: RunMode) -> ComponentResult:
        blocked = self._check_requirements(component, mode)
        if blocked is not None:
            self.logger.debug(f"{component.name}: {blocked.message}")
            return blocked

        operation = "check" if mode is RunMode.CHECK else "install"
        try:
            if mode is RunMode.CHECK:
                return component.check()
            return component.install()
        except Exception as e:
            self.logger.error(f"Error running {operation} of {component.name}: {e}")
            self.logger.debug("Component exception details", exc_info=True)
            return ComponentResult.failed(
                component.kind,
                format_error('ORCHESTRATOR_EXCEPTION', operation=f"{component.name} {operation}",
                             error_type=type(e).__name__, error=e),
                FailureCode.EXECUTION_ERROR,
            )

    def _check_requirements(self, component: EnvironmentComponent, mode: RunMode) -> Optional[ComponentResult]:
        """Failed result when the component cannot run in this context, else None."""
        requirements = component.requirements
        if mode is RunMode.INSTALL and requirements.need_admin and not self.context.is_admin:
            return ComponentResult.failed(
                component.kind,
                format_error('REQUIRES_ELEVATION', component=component.name),
                FailureCode.ELEVATION_REQUIRED,
            )
        if requirements.need_secondary_os and not self.context.secondary_os_available:
            return ComponentResult.failed(
                component.kind,
                format_error('REQUIRES_SECONDARY_OS', distro=self.context.distro),
                FailureCode.SECONDARY_OS_UNAVAILABLE,
            )
        return None
