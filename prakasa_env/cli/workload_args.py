"""
CLI argument builders for the workload commands.

run, join and chat forward every argument prakasa-env does not recognize
to the matching 'prakasa' subcommand; cmd joins them into the command to
run. The parser collects those arguments with parse_known_args.
"""

from prakasa_env.cli.common_args import HELP_MESSAGES, add_universal_arguments


def add_workload_arguments(parser):
    """Add run, join or chat arguments to the parser.

    Args:
        parser: Argparse subparser for one of the workload commands.
    """
    add_universal_arguments(parser)


def add_cmd_arguments(parser):
    """Add cmd arguments to the parser.

    Args:
        parser: Argparse subparser for the cmd command.
    """
    parser.add_argument(
        "--venv",
        action="store_true",
        help=HELP_MESSAGES['venv']
    )
    add_universal_arguments(parser)
