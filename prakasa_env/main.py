"""
Entry point for the ``prakasa-env`` console script.

Parses the command line, loads the configuration file, dispatches to the
check/install, config and workload handlers, and turns whatever they
return or raise into a process exit code.
"""

import json
import signal
import sys
import traceback

from rich.console import Console

from prakasa_env.cli_parser import parse_arguments
from prakasa_env.config import CommandResult
from prakasa_env.config_store import ConfigStore
from prakasa_env.env_logging import apply_logging_options, setup_logging
from prakasa_env.environment import (
    EnvironmentOrchestrator,
    RunMode,
    Verdict,
    build_execution_context,
    verdict_to_command_result,
)
from prakasa_env.error_messages import format_error
from prakasa_env.errors import (
    CommandExecutionError,
    ConfigurationError,
    EnvironmentRequirementError,
    PrakasaEnvException,
)
from prakasa_env.execution import CommandExecutor
from prakasa_env.launcher import WorkloadLauncher
from prakasa_env.progress import component_progress, render_summary

logger = setup_logging("prakasa_env")


def on_signal(signum, _frame):
    logger.warning(f"Stopping on {signal.Signals(signum).name}")
    sys.exit(CommandResult.INTERRUPTED)


def load_config(args) -> ConfigStore:
    config = ConfigStore(getattr(args, 'config_file', None), logger=logger)
    config.load()
    return config


def create_runtime(args, config, probe_secondary_os=True):
    """Build the executor and the ExecutionContext for one command."""
    executor = CommandExecutor(logger=logger, debug=getattr(args, 'debug', False))
    context = build_execution_context(config, executor, logger, probe_secondary_os=probe_secondary_os)
    return context, executor


def _report_next_steps(verdict, mode):
    if mode is RunMode.CHECK:
        if verdict is Verdict.SUCCESS:
            logger.status(format_error('CHECK_NEXT_STEPS'))
        elif verdict is Verdict.WARNING:
            logger.status(format_error('CHECK_NEXT_STEPS_WARNING'))
        else:
            logger.info("Run 'prakasa-env install' to install the missing components")
        return

    if verdict is Verdict.REBOOT_REQUIRED:
        logger.warning(format_error('REBOOT_REQUIRED'))
    elif verdict is Verdict.FAILED:
        logger.error(format_error('INSTALL_FAILED'))
    else:
        logger.status(format_error('INSTALL_NEXT_STEPS'))


def handle_environment_command(args, config, mode) -> CommandResult:
    """Run check or install over every component and report the outcome.

    Returns:
        CommandResult derived from the run's verdict.
    """
    context, executor = create_runtime(args, config)
    orchestrator = EnvironmentOrchestrator(context, executor, logger)

    if mode is RunMode.INSTALL and not context.is_admin:
        logger.warning("Not running as Administrator, WSL2 cannot be installed or enabled in this run")

    # Keep stdout clean for the JSON document
    console = Console(stderr=bool(getattr(args, 'json', False)))
    names = [component.name for component in orchestrator.components]
    with component_progress(names, logger=logger, console=console,
                            enabled=not getattr(args, 'no_progress', False)) as report:
        if mode is RunMode.CHECK:
            result = orchestrator.check_environment(report)
        else:
            result = orchestrator.install_environment(report)

    if getattr(args, 'json', False):
        print(json.dumps(result.to_dict(), indent=2))
    else:
        title = "Environment Check" if mode is RunMode.CHECK else "Environment Installation"
        render_summary(result, console=console, title=title)

    _report_next_steps(orchestrator.verdict, mode)
    return verdict_to_command_result(orchestrator.verdict, mode)


def handle_config_command(args, config) -> CommandResult:
    """Handle config list/get/set/unset/reset/path."""
    command = args.config_command

    if command == "list":
        for key, value in sorted(config.all_values().items()):
            print(f"{key} = {value}")
    elif command == "path":
        print(config.path)
    elif command == "reset":
        config.reset_to_defaults()
        logger.status("Configuration reset to defaults")
    else:
        config.require_valid_key(args.key)
        if command == "get":
            print(config.get_value(args.key))
        elif command == "set":
            config.set_value(args.key, args.value)
            logger.status(f"Set {args.key} = {args.value}")
        elif command == "unset":
            config.unset_value(args.key)
            logger.status(f"Unset {args.key}")

    return CommandResult.SUCCESS


def handle_workload_command(args, config) -> CommandResult:
    """Launch run/join/chat, or pass a command through with cmd.

    Raises:
        EnvironmentRequirementError: If the WSL distribution is not available.
        CommandExecutionError: If the launched command fails.
    """
    context, executor = create_runtime(args, config, probe_secondary_os=False)
    launcher = WorkloadLauncher(context, executor, logger)

    if args.program == "cmd":
        launcher.passthrough(" ".join(args.workload_args), use_venv=args.venv)
    else:
        launcher.launch(args.program, args.workload_args)
    return CommandResult.SUCCESS


# Most specific first; PrakasaEnvException catches the rest of the tree
EXIT_CODES = (
    (ConfigurationError, CommandResult.INVALID_ARGS),
    (EnvironmentRequirementError, CommandResult.ENVIRONMENT_ERROR),
    (CommandExecutionError, CommandResult.EXECUTION_ERROR),
    (PrakasaEnvException, CommandResult.EXECUTION_ERROR),
)


def exit_code_for(error: PrakasaEnvException) -> CommandResult:
    for error_type, result in EXIT_CODES:
        if isinstance(error, error_type):
            return result
    return CommandResult.EXECUTION_ERROR


def _dispatch(argv=None):
    signal.signal(signal.SIGINT, on_signal)
    signal.signal(signal.SIGTERM, on_signal)

    args = parse_arguments(argv)
    apply_logging_options(logger, args)

    config = load_config(args)
    try:
        if args.program == "check":
            return handle_environment_command(args, config, RunMode.CHECK)
        if args.program == "install":
            return handle_environment_command(args, config, RunMode.INSTALL)
        if args.program == "config":
            return handle_config_command(args, config)
        return handle_workload_command(args, config)
    finally:
        config.flush()


def main(argv=None):
    """Console entry point. Returns the process exit code."""
    try:
        return int(_dispatch(argv))
    except PrakasaEnvException as e:
        # str(e) already carries the details and the suggestion
        logger.error(str(e))
        return int(exit_code_for(e))
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return int(CommandResult.INTERRUPTED)
    except SystemExit:
        raise
    except Exception as e:
        logger.error(format_error('INTERNAL_ERROR', error=str(e)))
        logger.debug(traceback.format_exc())
        logger.info("Re-run with --debug to see where it failed")
        return int(CommandResult.EXECUTION_ERROR)


if __name__ == "__main__":
    sys.exit(main())
