"""
CLI argument builders for the environment commands, check and install.
"""

from prakasa_env.cli.common_args import add_universal_arguments


def add_check_arguments(parser):
    """Add check command arguments to the parser.

    Args:
        parser: Argparse subparser for the check command.
    """
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of a table"
    )
    add_universal_arguments(parser)


def add_install_arguments(parser):
    """Add install command arguments to the parser.

    Args:
        parser: Argparse subparser for the install command.
    """
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of a table"
    )
    add_universal_arguments(parser)
