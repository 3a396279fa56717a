"""
CLI argument builders for the config command.
"""

from prakasa_env.cli.common_args import HELP_MESSAGES, add_universal_arguments


def add_config_arguments(parser):
    """Add config command arguments to the parser.

    Args:
        parser: Argparse subparser for the config command.
    """
    config_subparsers = parser.add_subparsers(
        dest="config_command",
        required=True,
        help="Sub-commands"
    )
    parser.required = True

    list_parser = config_subparsers.add_parser('list', help=HELP_MESSAGES['config_list'])

    get_parser = config_subparsers.add_parser('get', help=HELP_MESSAGES['config_get'])
    get_parser.add_argument('key', help=HELP_MESSAGES['config_key'])

    set_parser = config_subparsers.add_parser('set', help=HELP_MESSAGES['config_set'])
    set_parser.add_argument('key', help=HELP_MESSAGES['config_key'])
    set_parser.add_argument('value', help=HELP_MESSAGES['config_value'])

    unset_parser = config_subparsers.add_parser('unset', help=HELP_MESSAGES['config_unset'])
    unset_parser.add_argument('key', help=HELP_MESSAGES['config_key'])

    reset_parser = config_subparsers.add_parser('reset', help=HELP_MESSAGES['config_reset'])

    path_parser = config_subparsers.add_parser('path', help=HELP_MESSAGES['config_path'])

    for _parser in [list_parser, get_parser, set_parser, unset_parser, reset_parser, path_parser]:
        add_universal_arguments(_parser)
