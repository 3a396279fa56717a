"""
Workload launch commands.

``run``, ``join`` and ``chat`` start the matching ``prakasa`` subcommand
inside the WSL distribution, from the project checkout and its virtual
environment. ``cmd`` runs an arbitrary command in the distribution. All of
them stream their output to the console and have no timeout.
"""

import logging
from typing import Dict, Sequence

from prakasa_env.config import CHAT_UI_URL, CUDA_BIN_DIR, PROJECT_DIR, PROJECT_PACKAGE
from prakasa_env.error_messages import format_error
from prakasa_env.errors import CommandExecutionError, EnvironmentRequirementError, ErrorCode
from prakasa_env.environment.host import check_secondary_os_available
from prakasa_env.environment.models import EnvironmentRequirements, ExecutionContext
from prakasa_env.execution import (
    Command,
    CommandExecutor,
    CommandOutcome,
    ExecutionTarget,
    SyntheticExitCode,
    chain,
)

WORKLOAD_SUBCOMMANDS = ("run", "join", "chat")

COMMAND_REQUIREMENTS: Dict[str, EnvironmentRequirements] = {
    "run": EnvironmentRequirements(need_secondary_os=True, sync_proxy=True),
    "join": EnvironmentRequirements(need_secondary_os=True, sync_proxy=True),
    "chat": EnvironmentRequirements(need_secondary_os=True, sync_proxy=True),
    "cmd": EnvironmentRequirements(need_secondary_os=True),
}

# Windows PATH entries under /mnt/c shadow the Linux CUDA tools
CUDA_PATH_EXPORT = (
    f"export PATH={CUDA_BIN_DIR}:"
    "$(echo \"$PATH\" | tr ':' '\\n' | grep -v '/mnt/c' | paste -sd ':' -)"
)
ACTIVATE_VENV = "source ./venv/bin/activate"


class WorkloadLauncher:
    """
    Launches workload commands in the secondary OS.

    Attributes:
        context: ExecutionContext with the distro and proxy to use.
        executor: CommandExecutor the commands are issued through.
    """

    def __init__(self, context: ExecutionContext, executor: CommandExecutor, logger: logging.Logger):
        self.context = context
        self.executor = executor
        self.logger = logger

    def prepare_context(self, requirements: EnvironmentRequirements) -> None:
        """
        Verify a command's requirements against the current host.

        The secondary OS availability is probed again rather than trusted
        from the context, since the distribution may have been removed.

        Raises:
            EnvironmentRequirementError: If elevation is required but not held,
                or the distribution is not installed.
        """
        if requirements.need_admin and not self.context.is_admin:
            raise EnvironmentRequirementError(
                format_error('ELEVATION_REQUIRED', command="prakasa-env"),
                requirement="administrator",
                code=ErrorCode.ELEVATION_REQUIRED,
            )

        if requirements.need_secondary_os:
            available = check_secondary_os_available(self.executor, self.context.distro)
            self.context.secondary_os_available = available
            if not available:
                raise EnvironmentRequirementError(
                    format_error('SECONDARY_OS_UNAVAILABLE', distro=self.context.distro),
                    requirement="secondary_os",
                    distro=self.context.distro,
                    code=ErrorCode.SECONDARY_OS_UNAVAILABLE,
                )

    def build_launch_script(self, subcommand: str, args: Sequence[str] = (), sync_proxy: bool = True) -> str:
        """
        Shell script that starts ``prakasa <subcommand> <args>`` in the project venv.

        Every argument is quoted, so user input cannot break out of the
        ``prakasa`` invocation.
        """
        proxy = self.context.proxy_url if sync_proxy else ""
        workload = Command.of(PROJECT_PACKAGE, subcommand, *args,
                              env={"HTTP_PROXY": proxy, "HTTPS_PROXY": proxy})
        return chain(Command.of("cd", PROJECT_DIR), CUDA_PATH_EXPORT, ACTIVATE_VENV, workload)

    def build_passthrough_script(self, command: str, use_venv: bool = False) -> str:
        """The user's command as given, optionally run from the activated project venv."""
        if not use_venv:
            return command
        return chain(Command.of("cd", PROJECT_DIR), ACTIVATE_VENV, command)

    def _execute(self, script: str, display: str) -> CommandOutcome:
        self.logger.verbose(f"Launching in {self.context.distro}: {display}")
        outcome = self.executor.run(script, timeout=None, target=ExecutionTarget.SECONDARY_OS, streamed=True)
        if outcome.succeeded:
            return outcome

        code = ErrorCode.COMMAND_FAILED
        if outcome.exit_code == SyntheticExitCode.SPAWN_FAILURE:
            code = ErrorCode.COMMAND_SPAWN_FAILED
        raise CommandExecutionError(
            format_error('LAUNCH_FAILED', command=display, exit_code=outcome.exit_code),
            command=script,
            exit_code=outcome.exit_code,
            stderr=outcome.stderr,
            code=code,
        )

    def launch(self, subcommand: str, args: Sequence[str] = ()) -> CommandOutcome:
        """
        Start one of the workload subcommands.

        Raises:
            ValueError: If ``subcommand`` is not run, join or chat.
            EnvironmentRequirementError: If the distribution is not available.
            CommandExecutionError: If the workload exits non-zero.
        """
        if subcommand not in WORKLOAD_SUBCOMMANDS:
            raise ValueError(f"Unsupported workload command: {subcommand}")

        requirements = COMMAND_REQUIREMENTS[subcommand]
        self.prepare_context(requirements)

        if subcommand == "chat":
            self.logger.status(f"Chat interface will be served at {CHAT_UI_URL}")

        script = self.build_launch_script(subcommand, args, sync_proxy=requirements.sync_proxy)
        display = " ".join([PROJECT_PACKAGE, subcommand, *args])
        outcome = self._execute(script, display)
        self.logger.status(f"'{PROJECT_PACKAGE} {subcommand}' finished")
        return outcome

    def passthrough(self, command: str, use_venv: bool = False) -> CommandOutcome:
        """Run ``command`` in the distribution with the console attached."""
        self.prepare_context(COMMAND_REQUIREMENTS["cmd"])
        return self._execute(self.build_passthrough_script(command, use_venv), command)
