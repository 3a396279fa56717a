"""
Common CLI arguments and help messages shared across commands.

This module contains:
- Help message definitions
- Program descriptions for every subcommand
- Universal argument function
"""

from prakasa_env.config import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, VALID_CONFIG_KEYS


# Help messages dictionary - shared across all argument builders
HELP_MESSAGES = {
    'sub_commands': "Select a subcommand.",

    # Environment
    'check': "Check whether this machine is ready to run Prakasa.",
    'install': "Install the missing prerequisites inside WSL2.",

    # Configuration
    'config_list': "Show every configuration value.",
    'config_get': "Show one configuration value.",
    'config_set': "Set a configuration value.",
    'config_unset': "Remove a configuration value. Built-in keys return to their default.",
    'config_reset': "Restore all configuration values to their defaults.",
    'config_path': "Show the location of the configuration file.",
    'config_key': f"Configuration key. Supported keys: {', '.join(VALID_CONFIG_KEYS)}",
    'config_value': "Value to store. Pass an empty string to clear it.",

    # Workload
    'run': "Start the Prakasa scheduler. Remaining arguments are passed to 'prakasa run'.",
    'join': "Join a Prakasa cluster as a node. Remaining arguments are passed to 'prakasa join'.",
    'chat': "Start the Prakasa chat interface. Remaining arguments are passed to 'prakasa chat'.",
    'cmd': "Run a command inside the WSL distribution. Remaining arguments form the command.",
    'venv': "Run the command from ~/prakasa with the project virtual environment activated.",

    # Output control
    'config_file': (
        f"Path to the configuration file. Defaults to ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH}"
    ),
    'log_file': "Also write a debug level log to this file.",
    'stream_log_level': "Console log level, e.g. INFO, STATUS, VERBOSE or DEBUG.",
    'no_progress': "Do not draw progress bars, print one line per component instead.",
}

# Program descriptions
PROGRAM_DESCRIPTIONS = {
    'check': "Check the environment prerequisites without changing anything",
    'install': "Install and update the environment prerequisites (requires Administrator for WSL2)",
    'config': "View and edit the prakasa-env configuration",
    'run': "Run the Prakasa scheduler inside WSL2",
    'join': "Join a Prakasa cluster from this machine",
    'chat': "Start the Prakasa chat web interface",
    'cmd': "Run an arbitrary command inside the WSL2 distribution",
}


def add_universal_arguments(parser):
    """Add arguments common to all commands.

    Args:
        parser: Argparse parser to add arguments to.
    """
    standard_args = parser.add_argument_group("Standard Arguments")
    standard_args.add_argument(
        '--config-file', '-c',
        type=str,
        default=None,
        help=HELP_MESSAGES['config_file']
    )

    output_control = parser.add_argument_group("Output Control")
    output_control.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode"
    )
    output_control.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose mode"
    )
    output_control.add_argument(
        "--stream-log-level",
        type=str,
        default=None,
        help=HELP_MESSAGES['stream_log_level']
    )
    output_control.add_argument(
        "--log-file",
        type=str,
        default=None,
        help=HELP_MESSAGES['log_file']
    )
    output_control.add_argument(
        "--no-progress",
        action="store_true",
        help=HELP_MESSAGES['no_progress']
    )
