"""
CLI argument parsing for prakasa-env.

This module provides the main argument parsing entry point,
using modular argument builders from the cli package.
"""

import argparse
import sys

from prakasa_env import VERSION
from prakasa_env.cli import (
    HELP_MESSAGES,
    PROGRAM_DESCRIPTIONS,
    add_check_arguments,
    add_cmd_arguments,
    add_config_arguments,
    add_install_arguments,
    add_workload_arguments,
)

# Commands whose unrecognized arguments are forwarded instead of rejected
PASSTHROUGH_PROGRAMS = ("run", "join", "chat", "cmd")


def build_parser():
    """Build the top-level parser with one subparser per command.

    Returns:
        Tuple of (parser, sub_programs_map).
    """
    parser = argparse.ArgumentParser(
        prog="prakasa-env",
        description="Prepare a Windows machine for Prakasa and launch it inside WSL2"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    sub_programs = parser.add_subparsers(dest="program", required=True, help=HELP_MESSAGES['sub_commands'])
    sub_programs.required = True

    sub_programs_map = {}
    for name in ("check", "install", "config", "run", "join", "chat", "cmd"):
        sub_programs_map[name] = sub_programs.add_parser(
            name,
            description=PROGRAM_DESCRIPTIONS[name],
            help=HELP_MESSAGES.get(name, PROGRAM_DESCRIPTIONS[name]),
            allow_abbrev=False,
        )

    add_check_arguments(sub_programs_map['check'])
    add_install_arguments(sub_programs_map['install'])
    add_config_arguments(sub_programs_map['config'])
    for name in ("run", "join", "chat"):
        add_workload_arguments(sub_programs_map[name])
    add_cmd_arguments(sub_programs_map['cmd'])

    return parser, sub_programs_map


def parse_arguments(argv=None):
    """Parse command-line arguments for prakasa-env.

    Args:
        argv: Argument list without the program name. Defaults to sys.argv[1:].

    Returns:
        argparse.Namespace: Parsed and validated arguments. Workload commands
        carry the forwarded arguments in ``workload_args``.
    """
    if argv is None:
        argv = sys.argv[1:]
    parser, sub_programs_map = build_parser()

    if not argv:
        parser.print_help(sys.stderr)
        sys.exit(1)

    parsed_args, extras = parser.parse_known_args(argv)

    if parsed_args.program in PASSTHROUGH_PROGRAMS:
        if extras and extras[0] == "--":
            extras = extras[1:]
        parsed_args.workload_args = extras
    elif extras:
        parser.error(f"unrecognized arguments: {' '.join(extras)}")

    validate_args(parsed_args, sub_programs_map)
    return parsed_args


def validate_args(args, sub_programs_map=None):
    """Reject argument combinations argparse cannot express."""
    if args.program == "cmd" and not args.workload_args:
        message = "cmd requires a command to run"
        if sub_programs_map:
            sub_programs_map['cmd'].error(message)
        raise ValueError(message)
