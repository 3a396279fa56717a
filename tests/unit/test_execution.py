"""
Tests for prakasa_env.execution.

Tests cover:
- bash and PowerShell quoting
- Command rendering with environment assignments
- chain() joining commands and literal fragments
- normalize_output decoding (UTF-8, UTF-16LE, BOM, line endings)
- CommandExecutor.build_argv for every target
- Real subprocess runs: exit codes, timeout, spawn failure, streaming
"""

import codecs
import sys
import time
from unittest.mock import patch

import pytest

from prakasa_env.execution import (
    Command,
    CommandExecutor,
    CommandOutcome,
    ExecutionTarget,
    Shell,
    SyntheticExitCode,
    chain,
    normalize_output,
    quote_bash,
    quote_powershell,
)
from tests.fixtures import MockLogger


class TestQuoting:
    """Tests for quote_bash and quote_powershell."""

    def test_bash_safe_argument_unchanged(self):
        """Should leave arguments made of safe characters untouched."""
        assert quote_bash("--query-gpu=name") == "--query-gpu=name"
        assert quote_bash("~/prakasa") == "~/prakasa"

    def test_bash_quotes_spaces(self):
        """Should single-quote arguments containing spaces."""
        assert quote_bash("hello world") == "'hello world'"

    def test_bash_escapes_single_quote(self):
        """Should close, escape and reopen around embedded single quotes."""
        assert quote_bash("it's") == "'it'\"'\"'s'"

    def test_bash_neutralizes_metacharacters(self):
        """Should quote arguments that would otherwise be shell syntax."""
        assert quote_bash("$(rm -rf /)") == "'$(rm -rf /)'"
        assert quote_bash("a;b") == "'a;b'"

    def test_bash_empty_argument(self):
        """Should render an empty argument as two single quotes."""
        assert quote_bash("") == "''"

    def test_powershell_doubles_single_quote(self):
        """Should double embedded single quotes."""
        assert quote_powershell("it's") == "'it''s'"

    def test_powershell_safe_argument_unchanged(self):
        """Should leave safe arguments such as Windows paths untouched."""
        assert quote_powershell(r"C:\Windows\System32") == r"C:\Windows\System32"

    def test_powershell_force_quotes_safe_argument(self):
        """Should quote safe arguments when forced."""
        assert quote_powershell("value", force=True) == "'value'"


class TestCommand:
    """Tests for the Command value object."""

    def test_render_quotes_each_argument(self):
        """Should quote every argument independently."""
        command = Command.of("prakasa", "run", "--model", "Qwen/Qwen3 0.6B")
        assert command.render() == "prakasa run --model 'Qwen/Qwen3 0.6B'"

    def test_of_drops_empty_env_values(self):
        """Should drop environment entries whose value is empty."""
        command = Command.of("git", "pull", env={"ALL_PROXY": ""})
        assert command.env == ()
        assert command.render() == "git pull"

    def test_render_bash_env_prefix(self):
        """Should prefix bash commands with NAME=value assignments."""
        command = Command.of("git", "pull", env={"ALL_PROXY": "http://proxy:3128"})
        assert command.render(Shell.BASH) == "ALL_PROXY=http://proxy:3128 git pull"

    def test_render_powershell_env_prefix(self):
        """Should set $env: variables before the PowerShell command."""
        command = Command.of("git", "pull", env={"ALL_PROXY": "http://proxy:3128"})
        assert command.render(Shell.POWERSHELL) == "$env:ALL_PROXY='http://proxy:3128'; git pull"

    def test_invalid_env_name_rejected(self):
        """Should raise ValueError for environment names that are not identifiers."""
        with pytest.raises(ValueError, match="Invalid environment variable name"):
            Command.of("git", "pull", env={"BAD-NAME": "x"})

    def test_str_is_bash_rendering(self):
        """Should render for bash when converted to str."""
        assert str(Command.of("pip", "--version")) == "pip --version"

    def test_argv(self):
        """Should return program followed by arguments."""
        assert Command.of("wsl", "--status").argv() == ["wsl", "--status"]


class TestChain:
    """Tests for chain()."""

    def test_joins_commands_and_fragments(self):
        """Should join rendered commands and literal fragments with '&&'."""
        script = chain(Command.of("cd", "~/prakasa"), "source ./venv/bin/activate")
        assert script == "cd ~/prakasa && source ./venv/bin/activate"

    def test_skips_empty_parts(self):
        """Should skip empty fragments."""
        assert chain("echo a", "", "echo b") == "echo a && echo b"

    def test_custom_operator(self):
        """Should use the given operator."""
        assert chain("false", "true", operator="||") == "false || true"


class TestNormalizeOutput:
    """Tests for normalize_output()."""

    def test_empty(self):
        """Should return an empty string for empty input."""
        assert normalize_output(b"") == ""

    def test_utf8_with_crlf(self):
        """Should decode UTF-8 and convert CRLF to LF."""
        assert normalize_output("héllo\r\nworld\r\n".encode("utf-8")) == "héllo\nworld\n"

    def test_utf16le_without_bom(self):
        """Should detect UTF-16LE output such as wsl.exe prints."""
        raw = "Ubuntu-24.04\r\n".encode("utf-16-le")
        assert normalize_output(raw) == "Ubuntu-24.04\n"

    def test_utf16le_with_bom(self):
        """Should strip the byte order mark."""
        raw = codecs.BOM_UTF16_LE + "Windows\r\n".encode("utf-16-le")
        assert normalize_output(raw) == "Windows\n"

    def test_strips_nul_characters(self):
        """Should remove stray NUL characters."""
        assert normalize_output(b"a\x00b") == "ab"

    def test_invalid_utf8_raises_for_local(self):
        """Should raise UnicodeDecodeError when nothing can decode LOCAL output."""
        with pytest.raises(UnicodeDecodeError):
            normalize_output(b"caf\xe9", ExecutionTarget.LOCAL)

    def test_elevated_falls_back_to_console_encoding(self):
        """Should decode ELEVATED output with the console code page."""
        with patch("prakasa_env.execution._console_encoding", return_value="cp1252"):
            assert normalize_output(b"caf\xe9", ExecutionTarget.ELEVATED) == "café"


class TestCommandOutcome:
    """Tests for CommandOutcome properties."""

    def test_succeeded(self):
        """Should report success only for exit code 0."""
        assert CommandOutcome(0).succeeded
        assert not CommandOutcome(1).succeeded

    def test_timed_out(self):
        """Should report a timeout for the synthetic timeout code."""
        assert CommandOutcome(SyntheticExitCode.TIMEOUT).timed_out

    def test_output_joins_non_empty_parts(self):
        """Should join stripped stdout and stderr, skipping empty ones."""
        assert CommandOutcome(1, "out\n", "").output == "out"
        assert CommandOutcome(1, "out\n", " err ").output == "out\nerr"


class TestBuildArgv:
    """Tests for CommandExecutor.build_argv()."""

    @pytest.fixture
    def executor(self):
        return CommandExecutor(logger=MockLogger(), distro="Ubuntu-24.04")

    def test_local_command(self, executor):
        """Should spawn a Command's argv directly."""
        assert executor.build_argv(Command.of("wsl", "--status")) == ["wsl", "--status"]

    def test_local_string_is_split(self, executor):
        """Should split LOCAL strings like a shell would."""
        assert executor.build_argv("wsl --list --quiet") == ["wsl", "--list", "--quiet"]

    def test_elevated_wraps_in_powershell(self, executor):
        """Should run ELEVATED commands through powershell.exe -Command."""
        argv = executor.build_argv(Command.of("wsl", "--status"), ExecutionTarget.ELEVATED)
        assert argv[0] == "powershell.exe"
        assert argv[-2:] == ["-Command", "wsl --status"]

    def test_secondary_os_wraps_in_wsl_bash(self, executor):
        """Should run SECONDARY_OS commands as root through bash -c in the distro."""
        argv = executor.build_argv(Command.of("pip", "--version"), ExecutionTarget.SECONDARY_OS)
        assert argv == ["wsl", "-d", "Ubuntu-24.04", "-u", "root", "bash", "-c", "pip --version"]

    def test_secondary_os_quotes_argv_sequence(self, executor):
        """Should quote each word of an argv sequence for bash."""
        argv = executor.build_argv(["echo", "a b"], ExecutionTarget.SECONDARY_OS)
        assert argv[-1] == "echo 'a b'"

    def test_describe(self, executor):
        """Should render the spawned command line."""
        assert executor.describe(Command.of("wsl", "--status")) == "wsl --status"


class TestCommandExecutorRun:
    """Tests for CommandExecutor.run() with real child processes."""

    @pytest.fixture
    def executor(self):
        return CommandExecutor(logger=MockLogger())

    def test_captures_stdout(self, executor):
        """Should capture and decode standard output."""
        outcome = executor.run([sys.executable, "-c", "print('hello')"])
        assert outcome.exit_code == 0
        assert outcome.stdout == "hello\n"

    def test_captures_stderr_and_exit_code(self, executor):
        """Should return the child's exit code and standard error."""
        script = "import sys; sys.stderr.write('boom'); sys.exit(3)"
        outcome = executor.run([sys.executable, "-c", script])
        assert outcome.exit_code == 3
        assert outcome.stderr == "boom"

    def test_timeout_terminates_process(self, executor):
        """Should terminate the child and report the timeout exit code."""
        start = time.monotonic()
        outcome = executor.run([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)
        elapsed = time.monotonic() - start

        assert outcome.exit_code == SyntheticExitCode.TIMEOUT
        assert outcome.timed_out
        assert "timed out" in outcome.stderr
        assert elapsed < 20

    def test_spawn_failure(self, executor):
        """Should report a spawn failure for a program that does not exist."""
        outcome = executor.run(["prakasa-env-no-such-program-xyz"])
        assert outcome.exit_code == SyntheticExitCode.SPAWN_FAILURE
        assert "Failed to start" in outcome.stderr

    def test_undecodable_output(self, executor):
        """Should report an encoding failure instead of raising."""
        script = "import sys; sys.stdout.buffer.write(bytes([0x63, 0x61, 0x66, 0xe9]))"
        outcome = executor.run([sys.executable, "-c", script])
        assert outcome.exit_code == SyntheticExitCode.ENCODING_FAILURE

    def test_streamed_run_copies_output(self, executor, capsys):
        """Should copy streamed output to the console and capture nothing."""
        outcome = executor.run([sys.executable, "-c", "print('streamed line')"], streamed=True)

        assert outcome.exit_code == 0
        assert outcome.stdout == ""
        assert "streamed line" in capsys.readouterr().out

    def test_streamed_run_timeout(self, executor):
        """Should terminate a streamed child on timeout."""
        outcome = executor.run([sys.executable, "-c", "import time; time.sleep(30)"],
                               timeout=0.5, streamed=True)
        assert outcome.exit_code == SyntheticExitCode.TIMEOUT

    def test_logs_command(self):
        """Should log the executed command at debug level."""
        logger = MockLogger()
        CommandExecutor(logger=logger).run([sys.executable, "-c", "pass"])
        assert logger.has_message('debug', 'Executing [local] command')
        assert logger.has_message('debug', 'Command exited with code 0')
