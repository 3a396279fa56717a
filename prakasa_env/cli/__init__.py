"""
CLI argument builders for prakasa-env.

Modules:
    - common_args: Shared help messages and universal arguments
    - environment_args: check and install arguments
    - config_args: config subcommands
    - workload_args: run, join, chat and cmd arguments
"""

from prakasa_env.cli.common_args import (
    HELP_MESSAGES,
    PROGRAM_DESCRIPTIONS,
    add_universal_arguments,
)

from prakasa_env.cli.environment_args import add_check_arguments, add_install_arguments
from prakasa_env.cli.config_args import add_config_arguments
from prakasa_env.cli.workload_args import add_workload_arguments, add_cmd_arguments

__all__ = [
    # Common
    'HELP_MESSAGES',
    'PROGRAM_DESCRIPTIONS',
    'add_universal_arguments',
    # Command argument builders
    'add_check_arguments',
    'add_install_arguments',
    'add_config_arguments',
    'add_workload_arguments',
    'add_cmd_arguments',
]
