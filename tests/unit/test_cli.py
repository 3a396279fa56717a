"""
Tests for CLI argument parsing in prakasa_env.cli_parser and prakasa_env.cli.

Tests cover:
- Subcommand selection and universal arguments
- check/install --json
- config subcommands and their positional arguments
- Forwarding of unrecognized arguments for run/join/chat/cmd
- Rejection of unknown arguments for the other commands
- Missing subcommands and empty command lines
"""

import pytest

from prakasa_env.cli_parser import build_parser, parse_arguments


class TestBuildParser:
    """Tests for build_parser."""

    def test_all_subcommands_registered(self):
        """Should register one subparser per command."""
        _, sub_programs_map = build_parser()
        assert set(sub_programs_map) == {"check", "install", "config", "run", "join", "chat", "cmd"}


class TestEnvironmentCommands:
    """Tests for check and install."""

    def test_check_defaults(self):
        """Should parse check with default output options."""
        args = parse_arguments(["check"])
        assert args.program == "check"
        assert args.json is False
        assert args.debug is False
        assert args.verbose is False
        assert args.stream_log_level is None
        assert args.config_file is None
        assert args.no_progress is False

    def test_install_with_options(self):
        """Should parse install with universal options."""
        args = parse_arguments(["install", "--json", "--verbose", "--no-progress",
                                "-c", "/tmp/env.yaml", "--log-file", "/tmp/env.log"])
        assert args.program == "install"
        assert args.json is True
        assert args.verbose is True
        assert args.no_progress is True
        assert args.config_file == "/tmp/env.yaml"
        assert args.log_file == "/tmp/env.log"

    def test_unknown_argument_rejected(self, capsys):
        """Should exit with usage error for unknown check arguments."""
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(["check", "--model", "x"])
        assert exc_info.value.code == 2
        assert "unrecognized arguments" in capsys.readouterr().err


class TestConfigCommand:
    """Tests for the config subcommands."""

    def test_set(self):
        """Should parse key and value."""
        args = parse_arguments(["config", "set", "proxy_url", "http://proxy:3128"])
        assert args.program == "config"
        assert args.config_command == "set"
        assert args.key == "proxy_url"
        assert args.value == "http://proxy:3128"

    @pytest.mark.parametrize("command", ["list", "reset", "path"])
    def test_commands_without_arguments(self, command):
        """Should parse config commands that take no key."""
        assert parse_arguments(["config", command]).config_command == command

    def test_get_requires_key(self):
        """Should exit when get has no key."""
        with pytest.raises(SystemExit):
            parse_arguments(["config", "get"])

    def test_missing_config_command(self):
        """Should exit when no config subcommand is given."""
        with pytest.raises(SystemExit):
            parse_arguments(["config"])


class TestWorkloadCommands:
    """Tests for run, join, chat and cmd."""

    def test_run_forwards_arguments(self):
        """Should forward unrecognized arguments to the workload."""
        args = parse_arguments(["run", "--model", "Qwen/Qwen3-0.6B", "--port", "3001"])
        assert args.program == "run"
        assert args.workload_args == ["--model", "Qwen/Qwen3-0.6B", "--port", "3001"]

    def test_join_without_arguments(self):
        """Should forward an empty list when nothing is given."""
        assert parse_arguments(["join"]).workload_args == []

    def test_own_options_consumed(self):
        """Should keep prakasa-env options for itself."""
        args = parse_arguments(["chat", "--verbose", "--host", "0.0.0.0"])
        assert args.verbose is True
        assert args.workload_args == ["--host", "0.0.0.0"]

    def test_double_dash_separator(self):
        """Should forward everything after '--' without the separator."""
        args = parse_arguments(["run", "--", "--verbose"])
        assert args.verbose is False
        assert args.workload_args == ["--verbose"]

    def test_cmd_with_venv(self):
        """Should parse --venv and collect the command words."""
        args = parse_arguments(["cmd", "--venv", "pip", "list"])
        assert args.venv is True
        assert args.workload_args == ["pip", "list"]

    def test_cmd_requires_command(self):
        """Should exit when cmd has nothing to run."""
        with pytest.raises(SystemExit):
            parse_arguments(["cmd"])


class TestParseArgumentsEdgeCases:
    """Tests for top-level parsing edge cases."""

    def test_no_arguments_prints_help(self, capsys):
        """Should print help and exit 1 without arguments."""
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments([])
        assert exc_info.value.code == 1
        assert "prakasa-env" in capsys.readouterr().err

    def test_unknown_subcommand(self):
        """Should exit for unknown subcommands."""
        with pytest.raises(SystemExit):
            parse_arguments(["serve"])

    def test_version(self, capsys):
        """Should print the version."""
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(["--version"])
        assert exc_info.value.code == 0
        assert "prakasa-env 1.0.0" in capsys.readouterr().out
